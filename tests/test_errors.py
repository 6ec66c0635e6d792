"""
Tests for application-wide error handling.
"""
import pytest

JSON_HEADERS = {'Accept': 'application/json'}


@pytest.fixture
def failing_app(app):
    @app.route('/boom')
    def boom():
        raise RuntimeError('database password is hunter2')

    return app


class TestNotFound:

    def test_unknown_path_page(self, client):
        response = client.get('/no/such/page')
        assert response.status_code == 404
        assert b'Sorry, we appear to have lost that page.' in response.data

    def test_unknown_path_json(self, client):
        response = client.get('/no/such/page', headers=JSON_HEADERS)
        assert response.status_code == 404
        assert response.get_json() == {'message': 'Sorry, we appear to have lost that page.'}


class TestServerError:

    def test_detail_hidden_outside_development(self, failing_app):
        response = failing_app.test_client().get('/boom', headers=JSON_HEADERS)
        assert response.status_code == 500
        assert response.get_json() == {'message': 'Server Error'}

    def test_error_page_hides_detail(self, failing_app):
        response = failing_app.test_client().get('/boom')
        assert response.status_code == 500
        assert b'Server Error' in response.data
        assert b'hunter2' not in response.data

    def test_detail_shown_in_development(self, failing_app):
        failing_app.config['ENV_NAME'] = 'development'
        response = failing_app.test_client().get('/boom', headers=JSON_HEADERS)
        assert response.status_code == 500
        assert response.get_json()['error'] == 'database password is hunter2'

    def test_unhandled_error_is_logged(self, failing_app, caplog):
        with caplog.at_level('ERROR', logger='routes.errors'):
            failing_app.test_client().get('/boom')
        assert 'Error at "/boom"' in caplog.text
