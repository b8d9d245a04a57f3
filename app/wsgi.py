from app.relife import create_app

app = create_app()
