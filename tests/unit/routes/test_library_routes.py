import io

import pytest

from tunebox.domain.library import MetadataExtractionError
from tunebox.domain.library.records import TrackMetadata


def _create_playlist(client, name="Mix", creator="Ana"):
    r = client.post('/api/playlists', json={"name": name, "creator": creator})
    assert r.status_code == 201
    return r.get_json()


def _upload(client, playlist_id, data=b"ID3 fake audio", filename="track.mp3", mime="audio/mpeg"):
    return client.post(
        '/api/songs',
        data={"playlistId": str(playlist_id), "audioFile": (io.BytesIO(data), filename, mime)},
        content_type='multipart/form-data',
    )


def _stored_files(upload_dir):
    if not upload_dir.exists():
        return []
    return sorted(p.name for p in upload_dir.iterdir() if p.is_file())


@pytest.mark.unit
def test_create_playlist_returns_201_with_camel_case_body(client):
    body = _create_playlist(client, "Road Trip", "Ana")

    assert body["name"] == "Road Trip"
    assert body["creator"] == "Ana"
    assert isinstance(body["id"], int)
    assert "createdAt" in body


@pytest.mark.unit
@pytest.mark.parametrize("payload", [{}, {"name": ""}, {"name": "   ", "creator": "Ana"}])
def test_create_playlist_without_name_is_400(client, payload):
    r = client.post('/api/playlists', json=payload)

    assert r.status_code == 400
    assert "error" in r.get_json()


@pytest.mark.unit
def test_create_playlist_with_non_json_body_is_400(client):
    r = client.post('/api/playlists', data="name=Mix", content_type='text/plain')

    assert r.status_code == 400


@pytest.mark.unit
def test_list_playlists_newest_first_with_song_count(client):
    first = _create_playlist(client, "First")
    second = _create_playlist(client, "Second")
    assert _upload(client, first["id"]).status_code == 201

    r = client.get('/api/playlists')

    assert r.status_code == 200
    listed = r.get_json()
    assert [p["id"] for p in listed] == [second["id"], first["id"]]
    assert [p["songCount"] for p in listed] == [0, 1]


@pytest.mark.unit
def test_get_playlist_returns_playlist_and_songs(client, extractor):
    extractor.metadata = TrackMetadata(title="Foo", artist="Bar", duration_seconds=125)
    playlist = _create_playlist(client)
    song = _upload(client, playlist["id"]).get_json()

    r = client.get(f"/api/playlists/{playlist['id']}")

    assert r.status_code == 200
    body = r.get_json()
    assert body["playlist"]["id"] == playlist["id"]
    assert body["songs"] == [song]
    assert song["title"] == "Foo"
    assert song["artist"] == "Bar"
    assert song["duration"] == "2:05"
    assert song["playlistId"] == playlist["id"]
    assert song["audioFile"].startswith("/uploads/")


@pytest.mark.unit
def test_get_unknown_playlist_is_404_json(client):
    r = client.get('/api/playlists/999')

    assert r.status_code == 404
    assert r.get_json() == {"error": "Playlist not found"}


@pytest.mark.unit
def test_non_numeric_playlist_id_is_404_json(client):
    r = client.get('/api/playlists/abc')

    assert r.status_code == 404
    assert "error" in r.get_json()


@pytest.mark.unit
def test_upload_without_file_is_400(client):
    playlist = _create_playlist(client)

    r = client.post('/api/songs', data={"playlistId": str(playlist["id"])}, content_type='multipart/form-data')

    assert r.status_code == 400
    assert r.get_json() == {"error": "No audio file uploaded"}


@pytest.mark.unit
def test_upload_non_audio_is_400_and_stores_nothing(client, upload_dir):
    playlist = _create_playlist(client)

    r = _upload(client, playlist["id"], data=b"%PDF-1.4", filename="doc.pdf", mime="application/pdf")

    assert r.status_code == 400
    assert r.get_json() == {"error": "Only audio files are allowed"}
    assert _stored_files(upload_dir) == []


@pytest.mark.unit
def test_upload_to_unknown_playlist_is_404(client, upload_dir):
    r = _upload(client, 999)

    assert r.status_code == 404
    assert r.get_json() == {"error": "Playlist not found"}
    assert _stored_files(upload_dir) == []


@pytest.mark.unit
def test_upload_to_unknown_playlist_allowed_when_check_disabled(make_app):
    client = make_app(REQUIRE_EXISTING_PLAYLIST=False).test_client()

    r = _upload(client, 999)

    assert r.status_code == 201
    assert r.get_json()["playlistId"] == 999


@pytest.mark.unit
def test_upload_over_configured_cap_is_413(make_app, upload_dir):
    client = make_app(MAX_UPLOAD_BYTES=16).test_client()
    playlist = _create_playlist(client)

    assert _upload(client, playlist["id"], data=b"x" * 16).status_code == 201
    r = _upload(client, playlist["id"], data=b"x" * 17)

    assert r.status_code == 413
    assert "error" in r.get_json()
    assert len(_stored_files(upload_dir)) == 1


@pytest.mark.unit
def test_request_body_over_transport_limit_is_413_json(make_app):
    client = make_app(MAX_CONTENT_LENGTH=64).test_client()

    r = _upload(client, 1, data=b"x" * 1024)

    assert r.status_code == 413
    assert "error" in r.get_json()


@pytest.mark.unit
def test_extraction_failure_is_500_and_leaves_no_blob(client, extractor, upload_dir):
    extractor.error = MetadataExtractionError("Could not read audio metadata: corrupt")
    playlist = _create_playlist(client)

    r = _upload(client, playlist["id"])

    assert r.status_code == 500
    assert r.get_json() == {"error": "Could not read audio metadata: corrupt"}
    assert _stored_files(upload_dir) == []
    assert client.get(f"/api/playlists/{playlist['id']}").get_json()["songs"] == []


@pytest.mark.unit
def test_uploaded_file_is_served_under_its_reference(client):
    playlist = _create_playlist(client)
    song = _upload(client, playlist["id"], data=b"sound bytes").get_json()

    r = client.get(song["audioFile"])

    assert r.status_code == 200
    assert r.data == b"sound bytes"


@pytest.mark.unit
def test_serving_missing_or_escaping_paths_is_404(client):
    assert client.get('/uploads/nope.mp3').status_code == 404
    assert client.get('/uploads/../config.py').status_code == 404


@pytest.mark.unit
def test_delete_song_then_again_is_404(client, upload_dir):
    playlist = _create_playlist(client)
    song = _upload(client, playlist["id"]).get_json()

    r = client.delete(f"/api/songs/{song['id']}")
    assert r.status_code == 200
    assert r.get_json() == {"message": "Song deleted successfully"}
    assert _stored_files(upload_dir) == []

    r = client.delete(f"/api/songs/{song['id']}")
    assert r.status_code == 404
    assert r.get_json() == {"error": "Song not found"}


@pytest.mark.unit
def test_delete_playlist_cascades(client, upload_dir):
    playlist = _create_playlist(client)
    _upload(client, playlist["id"])
    _upload(client, playlist["id"])

    r = client.delete(f"/api/playlists/{playlist['id']}")

    assert r.status_code == 200
    assert r.get_json() == {"message": "Playlist and all songs deleted successfully"}
    assert client.get(f"/api/playlists/{playlist['id']}").status_code == 404
    assert _stored_files(upload_dir) == []
    assert client.delete(f"/api/playlists/{playlist['id']}").status_code == 404


@pytest.mark.unit
def test_clear_all_reports_counts(client, upload_dir):
    playlist = _create_playlist(client)
    _upload(client, playlist["id"])

    r = client.delete('/api/clear-all')

    assert r.status_code == 200
    assert r.get_json() == {
        "message": "All data cleared successfully",
        "songsDeleted": 1,
        "playlistsDeleted": 1,
        "filesDeleted": 1,
    }
    assert client.get('/api/playlists').get_json() == []
    assert _stored_files(upload_dir) == []


@pytest.mark.unit
def test_clear_all_can_be_disabled(make_app):
    client = make_app(ALLOW_CLEAR_ALL=False).test_client()
    _create_playlist(client)

    r = client.delete('/api/clear-all')

    assert r.status_code == 403
    assert len(client.get('/api/playlists').get_json()) == 1


@pytest.mark.unit
def test_request_id_is_echoed_or_generated(client):
    r = client.get('/api/playlists', headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"

    r = client.get('/api/playlists')
    assert len(r.headers["X-Request-ID"]) == 32


@pytest.mark.unit
def test_cors_allows_configured_origin(make_app):
    client = make_app(CORS_ALLOWED_ORIGINS=["http://localhost:3000"]).test_client()

    r = client.get('/api/playlists', headers={"Origin": "http://localhost:3000"})

    assert r.headers.get("Access-Control-Allow-Origin") == "http://localhost:3000"
