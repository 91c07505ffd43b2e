# tests/test_metrics_endpoint.py
from feedbackhub import monitoring


def test_metrics_endpoint_returns_prometheus_format(client):
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "text/plain" in r.headers.get("content-type", "")
    assert "feedbackhub_requests_total" in r.text


def test_metrics_disabled(client, monkeypatch):
    monkeypatch.setattr(monitoring, "PROMETHEUS_ENABLED", False)
    r = client.get("/metrics")
    assert r.status_code == 404


def test_feedback_counter_increments(client, store):
    prompt = store.create_prompt("Counted", "")
    before = monitoring.FEEDBACK_SUBMITTED._value.get()
    client.post(f"/feedback/{prompt.id}", data={"content": "hi"})
    assert monitoring.FEEDBACK_SUBMITTED._value.get() == before + 1


def test_requests_labelled_by_route_template(client, store):
    prompt = store.create_prompt("Labelled", "")
    client.get(f"/feedback/{prompt.id}")
    sample = monitoring.REQUEST_COUNT.labels(method="GET", endpoint="/feedback/{prompt_id}", status="200")
    assert sample._value.get() >= 1


def test_render_metrics_survives_registry_failure(monkeypatch):
    def broken(registry):
        raise RuntimeError("collector exploded")

    monkeypatch.setattr(monitoring, "generate_latest", broken)
    payload, content_type = monitoring.render_metrics()
    assert payload == b""
    assert content_type == monitoring.CONTENT_TYPE_LATEST
