from africamap.server import MapSession


def test_session_tracks_revisions_and_width(cfg):
    session = MapSession(cfg)
    try:
        status = session.status()
        assert status["revision"] == 1
        assert status["width"] == 640
        assert status["mobile"] is False
        assert status["layout"]["height"] == 512

        session.resize(480)
        status = session.status()
        assert status["revision"] == 2
        assert status["mobile"] is True
        assert 'width="480"' in session.controller.svg_markup()
    finally:
        session.controller.dispose()
