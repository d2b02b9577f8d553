from rendera.main import app

app()
