"""
Tests for user lookups and the profile page.
"""
import pytest

JSON_HEADERS = {'Accept': 'application/json'}


class TestUserRoutes:

    def test_list_users(self, authenticated_client, test_user, other_user):
        response = authenticated_client.get('/users', headers=JSON_HEADERS)
        assert response.status_code == 200
        emails = {u['email'] for u in response.get_json()}
        assert emails == {'alice@example.com', 'bob@example.com'}

    def test_get_user(self, authenticated_client, other_user):
        response = authenticated_client.get(f'/users/{other_user.id}', headers=JSON_HEADERS)
        assert response.status_code == 200
        assert response.get_json()['display_name'] == 'Bob Example'

    def test_unknown_user(self, authenticated_client):
        response = authenticated_client.get('/users/' + 'd' * 32, headers=JSON_HEADERS)
        assert response.status_code == 404
        assert response.get_json() == {'message': 'User not found'}

    @pytest.mark.security
    def test_lookups_require_login(self, client):
        assert client.get('/users', headers=JSON_HEADERS).status_code == 401

    def test_own_profile(self, authenticated_client, test_user):
        response = authenticated_client.get(f'/users/{test_user.id}/profile')
        assert response.status_code == 200
        assert b'alice@example.com' in response.data
        assert b"Alice Example&#39;s Profile" in response.data

    @pytest.mark.security
    def test_other_profile_forbidden(self, authenticated_client, other_user):
        response = authenticated_client.get(f'/users/{other_user.id}/profile')
        assert response.status_code == 403
