import json

import pytest

BASE = "/api/v1/form-config"


def _location_payload(**overrides) -> dict:
    payload = {
        "id": "loc",
        "fieldKey": "location",
        "label": "Location",
        "type": "text",
        "order": 9,
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
def test_get_fields_returns_enabled_fields_in_envelope(client) -> None:
    response = client.get(f"{BASE}/fields")

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["error"] is False
    assert body["data"]["total"] == len(body["data"]["fields"]) == 17
    assert body["data"]["fields"][0]["id"] == "industry"
    assert body["data"]["fields"][0]["fieldKey"] == "industryId"


@pytest.mark.unit
def test_get_fields_hides_disabled_fields_but_all_keeps_them(client, store) -> None:
    store.update("hook", {"enabled": False})

    enabled_ids = [field["id"] for field in client.get(f"{BASE}/fields").get_json()["data"]["fields"]]
    all_ids = [field["id"] for field in client.get(f"{BASE}/fields/all").get_json()["data"]["fields"]]

    assert "hook" not in enabled_ids
    assert "hook" in all_ids


@pytest.mark.unit
def test_post_field_creates_and_conflicts_on_duplicate(client, store) -> None:
    created = client.post(f"{BASE}/fields", json=_location_payload())

    assert created.status_code == 201
    assert created.get_json()["data"]["field"]["id"] == "loc"
    assert store.get_by_id("loc") is not None

    duplicate = client.post(f"{BASE}/fields", json=_location_payload(fieldKey="other"))

    assert duplicate.status_code == 409
    body = duplicate.get_json()
    assert body["success"] is False
    assert body["message_code"] == "DUPLICATE_FIELD_ID"
    assert body["extra"] == {"field_id": "loc"}


@pytest.mark.unit
def test_post_field_rejects_invalid_payloads(client) -> None:
    assert client.post(f"{BASE}/fields", json=["not", "an", "object"]).status_code == 400
    assert client.post(f"{BASE}/fields", json=_location_payload(type="checkbox")).status_code == 400

    missing_source = client.post(f"{BASE}/fields", json=_location_payload(type="dropdown"))
    assert missing_source.status_code == 400
    assert missing_source.get_json()["message_code"] == "MISSING_DATA_SOURCE"


@pytest.mark.unit
def test_get_single_field_and_not_found(client) -> None:
    found = client.get(f"{BASE}/fields/hook")
    missing = client.get(f"{BASE}/fields/ghost")

    assert found.status_code == 200
    assert found.get_json()["data"]["field"]["fieldKey"] == "hook"
    assert missing.status_code == 404
    assert missing.get_json()["error"] is True


@pytest.mark.unit
def test_patch_field_updates_attributes(client, store) -> None:
    response = client.patch(f"{BASE}/fields/hook", json={"label": "Opening", "required": False})

    assert response.status_code == 200
    assert response.get_json()["data"]["field"]["label"] == "Opening"
    assert store.get_by_id("hook").required is False


@pytest.mark.unit
def test_patch_field_errors(client) -> None:
    assert client.patch(f"{BASE}/fields/ghost", json={"label": "x"}).status_code == 404
    assert client.patch(f"{BASE}/fields/hook", json={"fieldKey": "whyViral"}).status_code == 409
    assert client.patch(f"{BASE}/fields/hook", json={"id": "renamed"}).status_code == 400


@pytest.mark.unit
def test_delete_field_is_idempotent(client, store) -> None:
    first = client.delete(f"{BASE}/fields/hook")
    second = client.delete(f"{BASE}/fields/hook")

    assert first.status_code == 200
    assert second.status_code == 200
    assert store.get_by_id("hook") is None


@pytest.mark.unit
def test_reorder_fields(client, store) -> None:
    ids = [field.id for field in store.list_all()]
    wanted = [ids[2], ids[0], ids[1], *ids[3:]]

    response = client.post(f"{BASE}/fields/reorder", json={"field_ids": wanted})

    assert response.status_code == 200
    assert [field["id"] for field in response.get_json()["data"]["fields"]] == wanted


@pytest.mark.unit
@pytest.mark.parametrize("payload", [{}, {"field_ids": "hook"}, {"field_ids": [1, 2]}])
def test_reorder_rejects_malformed_payload(client, payload) -> None:
    assert client.post(f"{BASE}/fields/reorder", json=payload).status_code == 400


@pytest.mark.unit
def test_reset_restores_default_fields(client, store) -> None:
    store.delete("hook")

    response = client.post(f"{BASE}/reset")

    assert response.status_code == 200
    assert response.get_json()["data"]["total"] == 17
    assert store.get_by_id("hook") is not None


@pytest.mark.unit
def test_export_then_import_restores_configuration(client, store) -> None:
    client.post(f"{BASE}/fields", json=_location_payload())
    exported = client.get(f"{BASE}/export").get_json()["data"]["config"]
    assert json.loads(exported)["version"] == "1.0.0"

    client.post(f"{BASE}/reset")
    assert store.get_by_id("loc") is None

    response = client.post(f"{BASE}/import", json={"config": exported})

    assert response.status_code == 200
    assert store.get_by_id("loc") is not None


@pytest.mark.unit
@pytest.mark.parametrize("config", ["not json", '{"version": "1.0.0"}', 42])
def test_import_rejects_invalid_configuration(client, store, config) -> None:
    before = store.export_json()

    response = client.post(f"{BASE}/import", json={"config": config})

    assert response.status_code == 400
    assert store.export_json() == before


@pytest.mark.unit
def test_validate_submission_reports_errors_and_collected_values(client) -> None:
    response = client.post(f"{BASE}/submissions/validate", json={"values": {"hook": "strong open"}})

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["valid"] is False
    assert {error["field_id"] for error in data["errors"]} >= {"industry"}
    assert "hook" not in {error["field_id"] for error in data["errors"]}
    assert data["values"]["hook"] == "strong open"
    assert not any(key.startswith("_divider") for key in data["values"])


@pytest.mark.unit
def test_validate_submission_requires_values_object(client) -> None:
    assert client.post(f"{BASE}/submissions/validate", json={"values": []}).status_code == 400


@pytest.mark.unit
def test_persistence_failure_maps_to_service_unavailable(client, backend, monkeypatch) -> None:
    def _fail(_key: str, _value: str) -> None:
        raise OSError("read-only filesystem")

    monkeypatch.setattr(backend, "set", _fail)

    response = client.delete(f"{BASE}/fields/hook")

    assert response.status_code == 503
    assert response.get_json()["message_code"] == "STORAGE_WRITE_FAILED"


@pytest.mark.unit
def test_uncompilable_pattern_is_rejected_before_submissions(client, store) -> None:
    rule = {"type": "pattern", "value": "([a-z"}
    created = client.post(f"{BASE}/fields", json=_location_payload(validation=[rule]))
    patched = client.patch(f"{BASE}/fields/hook", json={"validation": [rule]})

    assert created.status_code == 400
    assert patched.status_code == 400
    assert store.get_by_id("loc") is None

    response = client.post(f"{BASE}/submissions/validate", json={"values": {"hook": "strong open"}})
    assert response.status_code == 200


@pytest.mark.unit
@pytest.mark.parametrize("field_id", ["all", "reorder"])
def test_route_segments_cannot_be_used_as_field_ids(client, field_id: str) -> None:
    response = client.post(f"{BASE}/fields", json=_location_payload(id=field_id))

    assert response.status_code == 400
    assert response.get_json()["extra"] == {"field_id": field_id}
    assert client.get(f"{BASE}/fields/all").status_code == 200
