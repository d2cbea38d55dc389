from portfolio_ingest.main import run

run()
