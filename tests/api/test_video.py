"""
Tests for /api/video/token.
"""


class TestVideoToken:

    def test_get_with_query(self, client, auth_headers, patient):
        response = client.get('/api/video/token?channel=lobby&uid=3', headers=auth_headers(patient.user))
        data = response.get_json()['data']
        assert response.status_code == 200
        assert data['channel'] == 'lobby'
        assert data['uid'] == 3
        assert data['token']

    def test_post_requires_channel(self, client, auth_headers, patient):
        response = client.post('/api/video/token', headers=auth_headers(patient.user), json={})
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Channel name is required'

    def test_expired_session_link(self, client, auth_headers, book, doctor, patient):
        session = book(patient, doctor)
        # booked with the fixed test clock, so the link is long expired in real time
        response = client.post('/api/video/token', headers=auth_headers(patient.user), json={'channel': session.video_room_id})
        assert response.status_code == 403

    def test_requires_token(self, client):
        assert client.get('/api/video/token?channel=lobby').status_code == 401


class TestVideoCredentialsAreNotAccessTokens:

    def _video_token(self, client, auth_headers, patient):
        response = client.get('/api/video/token?channel=lobby&uid=7', headers=auth_headers(patient.user))
        return response.get_json()['data']['token']

    def test_rejected_by_video_endpoint(self, client, auth_headers, patient):
        token = self._video_token(client, auth_headers, patient)
        response = client.get('/api/video/token?channel=lobby', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Video credentials cannot be used for API access'

    def test_rejected_by_me(self, client, auth_headers, patient):
        token = self._video_token(client, auth_headers, patient)
        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_rejected_by_appointment_listing(self, client, auth_headers, patient):
        token = self._video_token(client, auth_headers, patient)
        response = client.get('/api/appointments', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401
