from simfleet.cli.main import app

app()
