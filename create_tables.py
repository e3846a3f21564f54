from pawcare import create_app, db
from pawcare.models.food import seed_food_database

app = create_app()
with app.app_context():
    # Create the tables and load the food reference entries
    db.create_all()
    added = seed_food_database(db.session)
    print(f"Tables created successfully! ({added} reference foods added)")
