from megaverse.cli.app import app

app()
