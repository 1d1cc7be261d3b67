from studygroup import repositories, services
from studygroup.validators import BIO_MAX_LENGTH


def test_settings_require_token(client):
    r = client.get('/settings/profile')
    assert r.status_code in (401, 403)
    r2 = client.get('/settings/profile', headers={'Authorization': 'Bearer not-a-token'})
    assert r2.status_code == 401


def test_register_and_login(client):
    r = client.post('/auth/register', json={'nickname': 'whiteship', 'email': 'w@email.com', 'password': '12345678'})
    assert r.status_code == 200
    assert r.json()['nickname'] == 'whiteship'
    dup = client.post('/auth/register', json={'nickname': 'whiteship', 'email': 'w2@email.com', 'password': '12345678'})
    assert dup.status_code == 400
    assert dup.json()['errors'][0]['code'] == 'DuplicateValue'
    bad = client.post('/auth/login', json={'login': 'whiteship', 'password': 'wrong-password'})
    assert bad.status_code == 401


def test_update_profile(client, auth_headers, session, keesun):
    r = client.post('/settings/profile', json={'bio': 'short bio'}, headers=auth_headers)
    assert r.status_code == 200
    assert 'message' in r.json()
    session.expire_all()
    assert repositories.AccountRepository(session).get_by_nickname('keesun').bio == 'short bio'
    assert client.get('/settings/profile', headers=auth_headers).json()['bio'] == 'short bio'


def test_update_profile_error(client, auth_headers, session, keesun):
    r = client.post('/settings/profile', json={'bio': 'a' * (BIO_MAX_LENGTH + 1)}, headers=auth_headers)
    assert r.status_code == 400
    assert [(e['field'], e['code']) for e in r.json()['errors']] == [('bio', 'TooLong')]
    session.expire_all()
    assert repositories.AccountRepository(session).get_by_nickname('keesun').bio is None


def test_update_password(client, auth_headers):
    r = client.post('/settings/password', json={'new_password': 'abcdefgh', 'new_password_confirm': 'abcdefgh'}, headers=auth_headers)
    assert r.status_code == 200
    assert client.post('/auth/login', json={'login': 'keesun', 'password': 'abcdefgh'}).status_code == 200


def test_notifications(client, auth_headers):
    current = client.get('/settings/notifications', headers=auth_headers).json()
    assert current['study_created_by_web'] is True
    current['study_updated_by_email'] = True
    assert client.post('/settings/notifications', json=current, headers=auth_headers).status_code == 200
    assert client.get('/settings/notifications', headers=auth_headers).json() == current


def test_update_account(client, auth_headers, session):
    r = client.post('/settings/account', json={'nickname': 'whiteship'}, headers=auth_headers)
    assert r.status_code == 200
    new_headers = {'Authorization': f"Bearer {r.json()['access_token']}"}
    assert client.get('/settings/account', headers=new_headers).json() == {'nickname': 'whiteship'}
    session.expire_all()
    repo = repositories.AccountRepository(session)
    assert repo.get_by_nickname('whiteship') is not None
    assert repo.get_by_nickname('keesun') is None


def test_update_account_invalid_nickname(client, auth_headers):
    r = client.post('/settings/account', json={'nickname': 'No Spaces'}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()['errors'][0]['field'] == 'nickname'


def test_add_and_remove_tag(client, auth_headers, session):
    r = client.post('/settings/tags/add', json={'tag_title': 'newTag'}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()['tags'] == ['newTag']
    assert repositories.TagRepository(session).get_by_title('newTag') is not None
    listing = client.get('/settings/tags', headers=auth_headers).json()
    assert listing == {'tags': ['newTag'], 'whitelist': ['newTag']}

    r2 = client.post('/settings/tags/remove', json={'tag_title': 'newTag'}, headers=auth_headers)
    assert r2.status_code == 200
    assert r2.json()['tags'] == []


def test_remove_unknown_tag(client, auth_headers):
    r = client.post('/settings/tags/remove', json={'tag_title': 'ghost'}, headers=auth_headers)
    assert r.status_code == 400


def test_add_and_remove_zone(client, auth_headers, session, keesun, test_zone):
    name = str(test_zone)
    listing = client.get('/settings/zones', headers=auth_headers).json()
    assert listing == {'zones': [], 'whitelist': [name]}

    r = client.post('/settings/zones/add', json={'zone_name': name}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()['zones'] == [name]
    session.expire_all()
    zone = repositories.ZoneRepository(session).get_by_city_and_province('test', '테스트주')
    assert repositories.AccountRepository(session).get_by_nickname('keesun').has_zone(zone)

    r2 = client.post('/settings/zones/remove', json={'zone_name': name}, headers=auth_headers)
    assert r2.status_code == 200
    assert r2.json()['zones'] == []


def test_add_unknown_zone(client, auth_headers, session, keesun):
    r = client.post('/settings/zones/add', json={'zone_name': 'nowhere(없음)/없음'}, headers=auth_headers)
    assert r.status_code == 400
    session.expire_all()
    assert services.AssociationService(session).zones_of(keesun) == []


def test_health_sets_request_id(client):
    r = client.get('/health', headers={'X-Request-ID': 'abc'})
    assert r.json() == {'status': 'ok'}
    assert r.headers['X-Request-ID'] == 'abc'


def test_notifications_omitted_flags_are_switched_off(client, auth_headers):
    r = client.post('/settings/notifications', json={'study_updated_by_email': True}, headers=auth_headers)
    assert r.status_code == 200
    flags = client.get('/settings/notifications', headers=auth_headers).json()
    assert flags.pop('study_updated_by_email') is True
    assert set(flags.values()) == {False}
