"""
Tests for the serving loop: graceful shutdown drains in-flight requests
"""
import http.client
import threading
import time


def test_shutdown_waits_for_in_flight_requests(app, monkeypatch):
    import app as hub_module
    import auth

    events = []
    real_close_db = hub_module.close_db

    def slow_failure_delay():
        time.sleep(0.5)
        events.append('handled')

    def recording_close_db(target):
        events.append('close_db')
        real_close_db(target)

    monkeypatch.setattr(auth, 'failed_login_delay', slow_failure_delay)
    monkeypatch.setattr(hub_module, 'close_db', recording_close_db)

    server = hub_module.build_server(app, host='127.0.0.1', port=0)
    assert server.daemon_threads is False
    serving = threading.Thread(target=hub_module.serve, args=(app, server))
    serving.start()

    statuses = []

    def bad_login():
        conn = http.client.HTTPConnection('127.0.0.1', server.server_port, timeout=10)
        conn.request(
            'POST', '/admin/login',
            body='username=creator&password=nope',
            headers={'Content-Type': 'application/x-www-form-urlencoded'},
        )
        statuses.append(conn.getresponse().status)
        conn.close()

    requester = threading.Thread(target=bad_login)
    requester.start()
    time.sleep(0.2)

    server.shutdown()
    serving.join(timeout=10)
    requester.join(timeout=10)

    assert not serving.is_alive()
    assert events == ['handled', 'close_db']
    assert statuses == [302]
