from dotenv import load_dotenv

load_dotenv()

from pawcare import create_app

app = create_app()

if __name__ == '__main__':
    app.run(
        debug=app.config.get('DEBUG', False),
        host=app.config.get('FLASK_HOST', '0.0.0.0'),
        port=int(app.config.get('PORT', 3001))
    )
