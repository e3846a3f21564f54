from datetime import date, timedelta

import pytest

from tests.test_ai_service import RecordingProvider


def create_dog(client, headers, **fields):
    payload = {'name': 'Luna', 'breed': 'Collie'}
    payload.update(fields)
    response = client.post('/api/dogs', json=payload, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['dog']


def events_of_type(client, headers, event_type):
    return client.get(f'/api/events/type/{event_type}', headers=headers).get_json()['events']


class TestAuth:
    def test_register_login_and_me(self, client, register):
        register(email='Someone@Example.com')

        login = client.post('/api/auth/login', json={'email': 'someone@example.com', 'password': 'secret123'})
        assert login.status_code == 200
        token = login.get_json()['token']

        me = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert me.get_json()['user']['email'] == 'someone@example.com'

    def test_duplicate_email(self, client, register):
        register()
        response = client.post('/api/auth/register',
                               json={'email': 'owner@example.com', 'password': 'secret123', 'name': 'Again'})
        assert response.status_code == 409
        assert response.get_json() == {'error': 'Email already registered'}

    def test_bad_credentials(self, client, register):
        register()
        response = client.post('/api/auth/login', json={'email': 'owner@example.com', 'password': 'wrong-one'})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid email or password'

    def test_missing_and_invalid_tokens(self, client):
        assert client.get('/api/dogs').get_json() == {'error': 'Access token required'}
        response = client.get('/api/dogs', headers={'Authorization': 'Bearer not-a-token'})
        assert response.status_code == 401
        assert response.get_json() == {'error': 'Invalid or expired token'}

    def test_password_change_needs_current_password(self, client, auth_headers):
        response = client.put('/api/auth/me', json={'newPassword': 'another1'}, headers=auth_headers)
        assert response.status_code == 400

        response = client.put('/api/auth/me', json={'currentPassword': 'secret123', 'newPassword': 'another1'},
                              headers=auth_headers)
        assert response.status_code == 200
        login = client.post('/api/auth/login', json={'email': 'owner@example.com', 'password': 'another1'})
        assert login.status_code == 200

    def test_non_string_credentials_are_rejected(self, client, register):
        response = client.post('/api/auth/register', json={'email': 5, 'password': 'secret123', 'name': 'Five'})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'email must be a string'}

        register()
        assert client.post('/api/auth/login', json={'email': ['owner@example.com'],
                                                     'password': 'secret123'}).status_code == 400
        assert client.post('/api/auth/login', json={'email': 'owner@example.com',
                                                     'password': 123456}).status_code == 400


class TestOwnership:
    def test_other_users_dog_is_not_found(self, client, register):
        alice = register(email='alice@example.com')
        bob = register(email='bob@example.com')
        dog = create_dog(client, alice)

        assert client.get(f"/api/dogs/{dog['id']}", headers=bob).status_code == 404
        assert client.delete(f"/api/dogs/{dog['id']}", headers=bob).status_code == 404

        response = client.post('/api/vaccinations', headers=bob, json={
            'dog_id': dog['id'], 'vaccine_name': 'Rabies', 'date_administered': '2024-01-01'})
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Dog not found'}

        assert client.get('/api/dogs', headers=bob).get_json()['dogs'] == []


class TestDogs:
    def test_create_with_nested_records(self, client, auth_headers):
        dog = create_dog(client, auth_headers, weight=12.5, gender='female',
                         allergies=[{'allergen': 'Chicken', 'severity': 'severe'}],
                         health_conditions=[{'condition_name': 'Arthritis'}])

        details = client.get(f"/api/dogs/{dog['id']}", headers=auth_headers).get_json()['dog']
        assert details['allergies'][0]['severity'] == 'severe'
        assert details['health_conditions'][0]['status'] == 'active'
        assert [w['weight'] for w in details['weight_history']] == [12.5]

    def test_name_is_required(self, client, auth_headers):
        response = client.post('/api/dogs', json={'breed': 'Pug'}, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Dog name is required'}

    def test_non_string_name_is_rejected(self, client, auth_headers):
        response = client.post('/api/dogs', json={'name': 123}, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json() == {'error': 'name must be a string'}

        dog = create_dog(client, auth_headers)
        assert client.put(f"/api/dogs/{dog['id']}", json={'name': ['Luna']}, headers=auth_headers).status_code == 400

    def test_neutered_flag_must_be_a_json_boolean(self, client, auth_headers):
        response = client.post('/api/dogs', json={'name': 'Luna', 'is_neutered': 'false'}, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json() == {'error': 'is_neutered must be true or false'}

        dog = create_dog(client, auth_headers, is_neutered=False)
        assert dog['is_neutered'] is False
        response = client.put(f"/api/dogs/{dog['id']}", json={'is_neutered': 1}, headers=auth_headers)
        assert response.status_code == 400
        details = client.get(f"/api/dogs/{dog['id']}", headers=auth_headers).get_json()['dog']
        assert details['is_neutered'] is False

    def test_invalid_enum_and_date(self, client, auth_headers):
        assert client.post('/api/dogs', json={'name': 'X', 'gender': 'other'}, headers=auth_headers).status_code == 400
        response = client.post('/api/dogs', json={'name': 'X', 'date_of_birth': '03/04/2020'}, headers=auth_headers)
        assert response.status_code == 400
        assert 'YYYY-MM-DD' in response.get_json()['error']

    def test_weight_change_appends_history(self, client, auth_headers):
        dog = create_dog(client, auth_headers, weight=10)
        client.put(f"/api/dogs/{dog['id']}", json={'weight': 11}, headers=auth_headers)
        client.put(f"/api/dogs/{dog['id']}", json={'weight': 11}, headers=auth_headers)

        details = client.get(f"/api/dogs/{dog['id']}", headers=auth_headers).get_json()['dog']
        assert details['weight'] == 11
        assert len(details['weight_history']) == 2

    def test_anniversaries_are_materialized_once(self, client, auth_headers):
        dog = create_dog(client, auth_headers, date_of_birth='2019-05-20', adoption_date='2019-08-01')

        birthdays = events_of_type(client, auth_headers, 'birthday')
        assert len(birthdays) == 1
        assert birthdays[0]['title'] == "Luna's Birthday"
        assert birthdays[0]['recurrence_pattern'] == 'yearly'
        assert date.fromisoformat(birthdays[0]['event_date']) >= date.today()

        client.put(f"/api/dogs/{dog['id']}", json={'adoption_date': '2019-09-15'}, headers=auth_headers)
        client.put(f"/api/dogs/{dog['id']}", json={'adoption_date': '2019-09-15'}, headers=auth_headers)

        gotcha = events_of_type(client, auth_headers, 'adoption_anniversary')
        assert len(gotcha) == 1
        assert gotcha[0]['title'] == "Luna's Gotcha Day"
        assert gotcha[0]['event_date'][5:] == '09-15'

    def test_delete_keeps_events_without_dog(self, client, auth_headers):
        dog = create_dog(client, auth_headers, date_of_birth='2019-05-20')
        client.post('/api/vaccinations', headers=auth_headers, json={
            'dog_id': dog['id'], 'vaccine_name': 'Rabies', 'date_administered': '2024-01-01'})

        assert client.delete(f"/api/dogs/{dog['id']}", headers=auth_headers).status_code == 200

        events = client.get('/api/events', headers=auth_headers).get_json()['events']
        assert len(events) == 1
        assert events[0]['dog_id'] is None
        assert client.get(f"/api/vaccinations/dog/{dog['id']}", headers=auth_headers).status_code == 404


class TestCompanionEvents:
    def test_vaccination_due_date_event_follows_edits(self, client, auth_headers):
        dog = create_dog(client, auth_headers)
        due = date.today() + timedelta(days=60)
        created = client.post('/api/vaccinations', headers=auth_headers, json={
            'dog_id': dog['id'], 'vaccine_name': 'Rabies', 'date_administered': '2024-01-01',
            'next_due_date': due.isoformat()}).get_json()['vaccination']

        events = events_of_type(client, auth_headers, 'vet_appointment')
        assert len(events) == 1
        assert events[0]['title'] == 'Rabies Vaccination Due'
        assert events[0]['reminder_days_before'] == 14

        new_due = due + timedelta(days=10)
        client.put(f"/api/vaccinations/{created['id']}", json={'next_due_date': new_due.isoformat()},
                   headers=auth_headers)

        events = events_of_type(client, auth_headers, 'vet_appointment')
        assert len(events) == 1
        assert events[0]['event_date'] == new_due.isoformat()

    def test_medication_with_frequency_gets_daily_event(self, client, auth_headers):
        dog = create_dog(client, auth_headers)
        response = client.post('/api/health/medication', headers=auth_headers, json={
            'dog_id': dog['id'], 'name': 'Carprofen', 'dosage': '25mg', 'frequency': 'daily',
            'start_date': '2024-06-01'})
        assert response.status_code == 201

        events = events_of_type(client, auth_headers, 'medication')
        assert len(events) == 1
        assert events[0]['title'] == 'Give Carprofen medication'
        assert events[0]['description'] == 'Dosage: 25mg. Frequency: daily'
        assert events[0]['reminder_days_before'] == 0
        assert events[0]['is_recurring'] is True

    def test_medication_without_frequency_has_no_event(self, client, auth_headers):
        dog = create_dog(client, auth_headers)
        client.post('/api/health/medication', headers=auth_headers, json={
            'dog_id': dog['id'], 'name': 'Antibiotic', 'start_date': '2024-06-01'})
        assert events_of_type(client, auth_headers, 'medication') == []


class TestVaccinationViews:
    def test_upcoming_and_overdue(self, client, auth_headers):
        dog = create_dog(client, auth_headers)
        today = date.today()
        for name, due in (('Rabies', today + timedelta(days=20)), ('DHPP', today - timedelta(days=3)),
                          ('Lepto', today + timedelta(days=200))):
            client.post('/api/vaccinations', headers=auth_headers, json={
                'dog_id': dog['id'], 'vaccine_name': name, 'date_administered': '2023-01-01',
                'next_due_date': due.isoformat()})

        view = client.get('/api/vaccinations/upcoming', headers=auth_headers).get_json()
        assert [v['vaccine_name'] for v in view['upcoming']] == ['Rabies']
        assert [v['vaccine_name'] for v in view['overdue']] == ['DHPP']
        assert view['upcoming'][0]['dog_name'] == 'Luna'

        per_dog = client.get(f"/api/vaccinations/dog/{dog['id']}", headers=auth_headers).get_json()
        assert per_dog['total'] == 3


class TestEvents:
    def test_custom_event_defaults(self, client, auth_headers):
        response = client.post('/api/events', headers=auth_headers, json={
            'title': 'Park meetup', 'event_date': date.today().isoformat()})
        assert response.status_code == 201
        event = response.get_json()['event']
        assert event['event_type'] == 'custom'
        assert event['reminder_days_before'] == 1

        upcoming = client.get('/api/events/upcoming', headers=auth_headers).get_json()
        assert [e['title'] for e in upcoming['today']] == ['Park meetup']

    def test_partial_update_keeps_other_fields(self, client, auth_headers):
        event = client.post('/api/events', headers=auth_headers, json={
            'title': 'Groomer', 'event_type': 'grooming', 'event_date': '2030-01-05'}).get_json()['event']

        updated = client.put(f"/api/events/{event['id']}", json={'title': 'Groomer visit'},
                             headers=auth_headers).get_json()['event']
        assert updated['title'] == 'Groomer visit'
        assert updated['event_type'] == 'grooming'
        assert updated['event_date'] == '2030-01-05'

    def test_negative_lead_time_is_rejected(self, client, auth_headers):
        response = client.post('/api/events', headers=auth_headers, json={
            'title': 'Oops', 'event_date': '2030-01-05', 'reminder_days_before': -2})
        assert response.status_code == 400

    def test_flags_must_be_json_booleans(self, client, auth_headers):
        response = client.post('/api/events', headers=auth_headers, json={
            'title': 'Walk', 'event_date': '2030-01-05', 'is_recurring': 'yes'})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'is_recurring must be true or false'}

        event = client.post('/api/events', headers=auth_headers, json={
            'title': 'Walk', 'event_date': '2030-01-05'}).get_json()['event']
        response = client.put(f"/api/events/{event['id']}", json={'is_active': 'false'}, headers=auth_headers)
        assert response.status_code == 400
        events = client.get('/api/events', headers=auth_headers).get_json()['events']
        assert [e['is_active'] for e in events] == [True]


class TestHealth:
    def test_records_and_summary(self, client, auth_headers):
        dog = create_dog(client, auth_headers, health_conditions=[{'condition_name': 'Allergy', 'status': 'resolved'},
                                                                   {'condition_name': 'Arthritis'}])
        for day in ('2024-01-10', '2024-03-05'):
            response = client.post('/api/health/record', headers=auth_headers, json={
                'dog_id': dog['id'], 'record_type': 'vet_visit', 'record_date': day, 'title': f'Checkup {day}',
                'attachments': ['xray.png']})
            assert response.status_code == 201

        overview = client.get(f"/api/health/dog/{dog['id']}", headers=auth_headers).get_json()
        assert [r['record_date'] for r in overview['records']] == ['2024-03-05', '2024-01-10']
        assert overview['records'][0]['attachments'] == ['xray.png']

        client.post('/api/vaccinations', headers=auth_headers, json={
            'dog_id': dog['id'], 'vaccine_name': 'Rabies', 'date_administered': '2023-01-01',
            'next_due_date': (date.today() + timedelta(days=10)).isoformat()})

        summary = client.get('/api/health/summary', headers=auth_headers).get_json()['summaries'][0]
        assert summary['upcoming_vaccinations'] == 1
        assert summary['overdue_vaccinations'] == 0
        assert [c['condition_name'] for c in summary['active_conditions']] == ['Arthritis']
        assert len(summary['recent_records']) == 2

    def test_invalid_record_type(self, client, auth_headers):
        dog = create_dog(client, auth_headers)
        response = client.post('/api/health/record', headers=auth_headers, json={
            'dog_id': dog['id'], 'record_type': 'checkup', 'record_date': '2024-01-10', 'title': 'x'})
        assert response.status_code == 400
        assert response.get_json()['error'].startswith('Invalid record_type')


class TestToys:
    def test_spending_and_favorites(self, client, auth_headers):
        dog = create_dog(client, auth_headers)
        ball = client.post('/api/toys', headers=auth_headers, json={
            'dog_id': dog['id'], 'name': 'Ball', 'purchase_price': 5.5}).get_json()['toy']
        client.post('/api/toys', headers=auth_headers, json={
            'dog_id': dog['id'], 'name': 'Bed', 'category': 'bed', 'purchase_price': 40,
            'condition': 'needs_replacement'})

        summary = client.get('/api/toys/spending-summary', headers=auth_headers).get_json()
        assert summary['grand_total'] == 45.5

        toggled = client.post(f"/api/toys/{ball['id']}/favorite", headers=auth_headers).get_json()
        assert toggled['is_favorite'] is True
        favorites = client.get('/api/toys/favorites', headers=auth_headers).get_json()['favorites']
        assert [t['name'] for t in favorites] == ['Ball']

        worn = client.get('/api/toys/needs-replacement', headers=auth_headers).get_json()['items']
        assert [t['name'] for t in worn] == ['Bed']


class TestFood:
    def test_public_lookup(self, client):
        response = client.get('/api/food/Grapes')
        assert response.status_code == 200
        assert response.get_json()['food']['safety_level'] == 'dangerous'

    def test_unknown_food_suggests_assistant(self, client):
        response = client.get('/api/food/durian')
        assert response.status_code == 404
        assert 'suggestion' in response.get_json()

    def test_search_requires_query(self, client):
        assert client.get('/api/food/search').status_code == 400
        results = client.get('/api/food/search?q=nuts').get_json()['results']
        assert [f['food_name'] for f in results] == ['Macadamia Nuts']

    def test_admin_insert_is_append_only(self, client, auth_headers):
        payload = {'food_name': 'Chocolate', 'is_safe': True, 'safety_level': 'safe'}
        assert client.post('/api/food', json=payload, headers=auth_headers).status_code == 409


class TestAssistant:
    @pytest.fixture
    def provider(self, app):
        provider = RecordingProvider('openai', reply='Keep it away. [Source: ASPCA]')
        app.extensions['pawcare_ai_providers'] = {'openai': provider}
        return provider

    def test_no_provider_configured(self, client, auth_headers):
        response = client.post('/api/ai/ask', json={'question': 'Hello?'}, headers=auth_headers)
        assert response.status_code == 502

    def test_ask_logs_history(self, client, auth_headers, provider):
        dog = create_dog(client, auth_headers)
        response = client.post('/api/ai/ask', headers=auth_headers,
                               json={'question': 'Can dogs eat chocolate?', 'dog_id': dog['id']})
        body = response.get_json()
        assert body['sources'] == ['ASPCA']
        assert body['provider'] == 'openai'
        assert 'DOG PROFILE CONTEXT' in provider.prompts[0][1]

        history = client.get('/api/ai/history', headers=auth_headers).get_json()['history']
        assert history[0]['query'] == 'Can dogs eat chocolate?'
        assert history[0]['dog_name'] == 'Luna'

    def test_ask_about_someone_elses_dog(self, client, register, provider):
        alice = register(email='alice@example.com')
        bob = register(email='bob@example.com')
        dog = create_dog(client, alice)
        response = client.post('/api/ai/ask', headers=bob, json={'question': 'Walks?', 'dog_id': dog['id']})
        assert response.status_code == 404
        assert provider.prompts == []

    def test_food_check_prefers_reference_table(self, client, auth_headers, provider):
        body = client.get('/api/ai/food-check/Carrots', headers=auth_headers).get_json()
        assert body['from_database'] is True
        assert body['quick_answer'].startswith('Carrots is generally safe for dogs.')
        assert provider.prompts == []

        body = client.get('/api/ai/food-check/durian', headers=auth_headers).get_json()
        assert body['from_database'] is False
        assert 'disclaimer' in body

    def test_symptoms_must_be_a_list(self, client, auth_headers, provider):
        response = client.post('/api/ai/analyze-symptoms', json={'symptoms': 'cough'}, headers=auth_headers)
        assert response.status_code == 400
