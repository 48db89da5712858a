"""API resource tests."""

import json
from datetime import timedelta
from uuid import uuid4

import pytest

from quillgate.domain.value_objects import PermissionAction

from tests.conftest import NOW, TEST_USER_ID, make_grant, make_rule

ANONYMOUS = {"X-Test-Anonymous": "1"}
AUTHOR_ONLY = {"field": "author_id", "operator": "equals", "value": "$user.id"}


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("POST", "/v1/permissions/check"),
        ("POST", "/v1/permissions/check-batch"),
        ("GET", "/v1/permissions/temporary"),
        ("POST", "/v1/permissions/data-rules"),
        ("GET", f"/v1/roles/{uuid4()}/permissions"),
        ("POST", "/v1/config"),
        ("GET", f"/v1/config/{uuid4()}"),
        ("GET", "/v1/config/pending-approvals"),
        ("GET", f"/v1/users/{TEST_USER_ID}/data-rules"),
        ("GET", "/v1/audit-logs"),
        ("GET", "/v1/audit-logs/report"),
    ],
)
def test_anonymous_requests_are_unauthorized(client, method, path) -> None:
    result = client.simulate_request(method, path, headers=ANONYMOUS, json={})
    assert result.status_code == 401
    assert result.json["error"] == "Unauthorized"


# --- permission check ---


def test_check_allows_and_reports_audit_entry(client, fake_uow) -> None:
    author = fake_uow.add_role("Author", "posts.write")
    fake_uow.users._by_id[TEST_USER_ID].role_ids = [author.id]

    result = client.simulate_post(
        "/v1/permissions/check",
        json={
            "resource_type": "posts",
            "operation": "write",
            "resource_id": "post123",
        },
    )

    assert result.status_code == 200
    assert result.json["allowed"] is True
    assert result.json["reason"] == "role grant"
    entry = fake_uow.audit_logs.entries[-1]
    assert result.json["audit_log_id"] == str(entry.id)
    assert entry.session_id == "session-1"


def test_check_denies_with_data_rule_reason(client, fake_uow, resource_provider) -> None:
    author = fake_uow.add_role("Author", "posts.write")
    fake_uow.users._by_id[TEST_USER_ID].role_ids = [author.id]
    rule = make_rule(json.dumps(AUTHOR_ONLY), role_id=author.id)
    fake_uow.data_rules._by_id[rule.id] = rule
    resource_provider.add("posts", "post456", author_id="someone-else")

    result = client.simulate_post(
        "/v1/permissions/check",
        json={
            "resource_type": "posts",
            "operation": "write",
            "resource_id": "post456",
        },
    )

    assert result.status_code == 200
    assert result.json["allowed"] is False
    assert result.json["reason"] == "data-rule restriction"


def test_check_keeps_correlation_id(client) -> None:
    correlation_id = str(uuid4())
    result = client.simulate_post(
        "/v1/permissions/check",
        json={"resource_type": "posts", "operation": "read", "correlation_id": correlation_id},
    )
    assert result.json["correlation_id"] == correlation_id


def test_check_missing_field_returns_400(client) -> None:
    result = client.simulate_post("/v1/permissions/check", json={"operation": "read"})
    assert result.status_code == 400
    assert "Missing required field" in result.json["error"]


def test_check_invalid_operation_returns_400(client) -> None:
    result = client.simulate_post(
        "/v1/permissions/check", json={"resource_type": "posts", "operation": "publish"}
    )
    assert result.status_code == 400
    assert result.json["type"] == "ValidationError"


def test_check_for_other_user_requires_permission_admin(client) -> None:
    result = client.simulate_post(
        "/v1/permissions/check",
        json={"resource_type": "posts", "operation": "read", "user_id": "someone-else"},
    )
    assert result.status_code == 403
    assert result.json["type"] == "PermissionDenied"


def test_check_ignores_record_in_request_body(client, fake_uow, resource_provider) -> None:
    author = fake_uow.add_role("Author", "posts.write")
    fake_uow.users._by_id[TEST_USER_ID].role_ids = [author.id]
    rule = make_rule(json.dumps(AUTHOR_ONLY), role_id=author.id)
    fake_uow.data_rules._by_id[rule.id] = rule
    resource_provider.add("posts", "post789", author_id="someone-else")

    result = client.simulate_post(
        "/v1/permissions/check",
        json={
            "resource_type": "posts",
            "operation": "write",
            "resource_id": "post789",
            "record": {"author_id": TEST_USER_ID},
        },
    )

    assert result.json["allowed"] is False
    assert result.json["reason"] == "data-rule restriction"


def test_check_batch_reports_each_record(client, fake_uow, resource_provider) -> None:
    author = fake_uow.add_role("Author", "posts.write")
    fake_uow.users._by_id[TEST_USER_ID].role_ids = [author.id]
    rule = make_rule(json.dumps(AUTHOR_ONLY), role_id=author.id)
    fake_uow.data_rules._by_id[rule.id] = rule
    resource_provider.add("posts", "mine", author_id=TEST_USER_ID)
    resource_provider.add("posts", "theirs", author_id="someone-else")

    result = client.simulate_post(
        "/v1/permissions/check-batch",
        json={
            "resource_type": "posts",
            "operation": "write",
            "resource_ids": ["mine", "theirs", "gone", "mine"],
        },
    )

    assert result.status_code == 200
    assert result.json["accessible"] == ["mine"]
    reasons = {r["resource_id"]: r["reason"] for r in result.json["results"]}
    assert reasons == {
        "mine": "role grant",
        "theirs": "data-rule restriction",
        "gone": "record not found",
    }
    checks = [e for e in fake_uow.audit_logs.entries if e.action == "PermissionCheck"]
    assert len(checks) == 3
    assert {str(e.correlation_id) for e in checks} == {result.json["correlation_id"]}


@pytest.mark.parametrize("resource_ids", [[], "post1", [f"p{i}" for i in range(101)]])
def test_check_batch_rejects_bad_id_lists(client, resource_ids) -> None:
    result = client.simulate_post(
        "/v1/permissions/check-batch",
        json={"resource_type": "posts", "operation": "read", "resource_ids": resource_ids},
    )
    assert result.status_code == 400
    assert result.json["type"] == "ValidationError"


def test_check_batch_missing_ids_returns_400(client) -> None:
    result = client.simulate_post(
        "/v1/permissions/check-batch", json={"resource_type": "posts", "operation": "read"}
    )
    assert result.status_code == 400
    assert "Missing required field" in result.json["error"]


# --- temporary permissions ---


def _grant_body(**overrides) -> dict:
    body = {
        "user_id": "u2",
        "resource_type": "reports",
        "operation": "read",
        "valid_from": NOW.isoformat(),
        "valid_to": (NOW + timedelta(days=7)).isoformat(),
        "reason": "quarterly review",
    }
    body.update(overrides)
    return body


def test_grant_and_list_temporary_permission(client, fake_uow) -> None:
    editor = fake_uow.add_role("Editor", "reports.read")
    fake_uow.users._by_id[TEST_USER_ID].role_ids = [editor.id]
    fake_uow.add_user("u2")

    created = client.simulate_post("/v1/permissions/temporary", json=_grant_body())
    listed = client.simulate_get("/v1/permissions/temporary", params={"user_id": "u2"})

    assert created.status_code == 201
    assert created.json["user_id"] == "u2"
    assert created.json["granted_by"] == TEST_USER_ID
    assert created.json["valid_to"] == (NOW + timedelta(days=7)).isoformat()
    assert listed.status_code == 200
    assert [g["id"] for g in listed.json["items"]] == [created.json["id"]]


def test_grant_without_scope_returns_403(client, fake_uow) -> None:
    fake_uow.add_user("u2")
    result = client.simulate_post("/v1/permissions/temporary", json=_grant_body())
    assert result.status_code == 403
    assert result.json["type"] == "InsufficientGrantorScope"


def test_grant_with_naive_timestamp_returns_400(client) -> None:
    result = client.simulate_post(
        "/v1/permissions/temporary", json=_grant_body(valid_from="2024-01-03T12:00:00")
    )
    assert result.status_code == 400
    assert "timezone" in result.json["error"]


def test_grant_without_reason_returns_400(client) -> None:
    result = client.simulate_post("/v1/permissions/temporary", json=_grant_body(reason=" "))
    assert result.status_code == 400


def test_revoke_temporary_permission(client, fake_uow) -> None:
    grant = make_grant("u2", granted_by=TEST_USER_ID)
    fake_uow.temporary_permissions._by_id[grant.id] = grant

    result = client.simulate_post(
        f"/v1/permissions/temporary/{grant.id}/revoke", json={"reason": "done"}
    )
    again = client.simulate_post(
        f"/v1/permissions/temporary/{grant.id}/revoke", json={"reason": "done"}
    )

    assert result.status_code == 200
    assert result.json["revoked"] == [str(grant.id)]
    assert again.json["revoked"] == []


def test_revoke_requires_reason(client) -> None:
    result = client.simulate_post(f"/v1/permissions/temporary/{uuid4()}/revoke")
    assert result.status_code == 400


def test_delegate_temporary_permission(client, fake_uow) -> None:
    fake_uow.add_user("u2")
    grant = make_grant(TEST_USER_ID)
    fake_uow.temporary_permissions._by_id[grant.id] = grant

    result = client.simulate_post(
        f"/v1/permissions/temporary/{grant.id}/delegate",
        json={
            "user_id": "u2",
            "valid_to": (NOW + timedelta(days=1)).isoformat(),
            "reason": "vacation cover",
        },
    )

    assert result.status_code == 201
    assert result.json["delegated_from"] == str(grant.id)
    assert result.json["user_id"] == "u2"


def test_delegate_beyond_source_returns_403(client, fake_uow) -> None:
    fake_uow.add_user("u2")
    grant = make_grant(TEST_USER_ID)
    fake_uow.temporary_permissions._by_id[grant.id] = grant

    result = client.simulate_post(
        f"/v1/permissions/temporary/{grant.id}/delegate",
        json={
            "user_id": "u2",
            "valid_to": (grant.expires_at + timedelta(days=1)).isoformat(),
            "reason": "too long",
        },
    )

    assert result.status_code == 403
    assert result.json["type"] == "DelegationNotPermitted"


def test_unknown_grant_returns_404(client) -> None:
    result = client.simulate_post(
        f"/v1/permissions/temporary/{uuid4()}/revoke", json={"reason": "x"}
    )
    assert result.status_code == 404


def test_malformed_grant_id_returns_400(client) -> None:
    result = client.simulate_post(
        "/v1/permissions/temporary/not-a-uuid/revoke", json={"reason": "x"}
    )
    assert result.status_code == 400


# --- data rules ---


def test_data_rule_lifecycle(client, fake_uow) -> None:
    created = client.simulate_post(
        "/v1/permissions/data-rules",
        json={
            "resource_type": "posts",
            "operation": "write",
            "conditions": AUTHOR_ONLY,
            "user_id": "u1",
        },
    )
    assert created.status_code == 201
    assert json.loads(created.json["conditions"]) == AUTHOR_ONLY
    rule_id = created.json["id"]

    updated = client.simulate_post(
        "/v1/permissions/data-rules",
        json={
            "id": rule_id,
            "row_version": 1,
            "resource_type": "posts",
            "operation": "write",
            "conditions": AUTHOR_ONLY,
            "user_id": "u1",
            "remarks": "own posts only",
        },
    )
    assert updated.status_code == 200
    assert updated.json["row_version"] == 2

    stale = client.simulate_post(
        "/v1/permissions/data-rules",
        json={
            "id": rule_id,
            "row_version": 1,
            "resource_type": "posts",
            "operation": "write",
            "conditions": AUTHOR_ONLY,
            "user_id": "u1",
        },
    )
    assert stale.status_code == 409
    assert stale.json["type"] == "ConcurrentModification"

    deactivated = client.simulate_post(f"/v1/permissions/data-rules/{rule_id}/deactivate")
    assert deactivated.status_code == 200
    assert deactivated.json["is_active"] is False

    active = client.simulate_get("/v1/permissions/data-rules", params={"resource_type": "posts"})
    everything = client.simulate_get(
        "/v1/permissions/data-rules",
        params={"resource_type": "posts", "include_inactive": "true"},
    )
    assert active.json["items"] == []
    assert len(everything.json["items"]) == 1


def test_data_rule_with_bad_condition_returns_400(client) -> None:
    result = client.simulate_post(
        "/v1/permissions/data-rules",
        json={
            "resource_type": "posts",
            "operation": "write",
            "conditions": {"field": "author_id", "operator": "like", "value": "x"},
            "user_id": "u1",
        },
    )
    assert result.status_code == 400


def test_data_rule_nested_too_deep_returns_400(client, fake_uow) -> None:
    leaf = json.dumps(AUTHOR_ONLY)
    result = client.simulate_post(
        "/v1/permissions/data-rules",
        json={
            "resource_type": "posts",
            "operation": "write",
            "conditions": '{"or": [' * 1500 + leaf + "]}" * 1500,
            "user_id": "u1",
        },
    )
    assert result.status_code == 400
    assert result.json["type"] == "ValidationError"
    assert fake_uow.data_rules._by_id == {}


def test_list_data_rules_requires_resource_type(client) -> None:
    result = client.simulate_get("/v1/permissions/data-rules")
    assert result.status_code == 400


def test_list_user_data_rules(client, fake_uow) -> None:
    author = fake_uow.add_role("Author", "posts.write")
    fake_uow.users._by_id[TEST_USER_ID].role_ids = [author.id]
    by_role = make_rule(json.dumps(AUTHOR_ONLY), role_id=author.id)
    own = make_rule(json.dumps(AUTHOR_ONLY), resource_type="comments", user_id=TEST_USER_ID)
    other = make_rule(json.dumps(AUTHOR_ONLY), user_id="someone-else")
    expired = make_rule(
        json.dumps(AUTHOR_ONLY), user_id=TEST_USER_ID, effective_to=NOW - timedelta(hours=1)
    )
    for rule in (by_role, own, other, expired):
        fake_uow.data_rules._by_id[rule.id] = rule

    everything = client.simulate_get(f"/v1/users/{TEST_USER_ID}/data-rules")
    posts_only = client.simulate_get(
        f"/v1/users/{TEST_USER_ID}/data-rules", params={"resource_type": "posts"}
    )

    assert everything.status_code == 200
    assert {r["id"] for r in everything.json["items"]} == {str(by_role.id), str(own.id)}
    assert [r["id"] for r in posts_only.json["items"]] == [str(by_role.id)]


def test_list_data_rules_of_unknown_user_returns_404(client) -> None:
    result = client.simulate_get("/v1/users/nobody/data-rules")
    assert result.status_code == 404


# --- roles ---


def test_role_permission_assign_list_revoke(client, fake_uow) -> None:
    role = fake_uow.add_role("Author")
    permission = fake_uow.permission("posts.write")

    assigned = client.simulate_post(
        f"/v1/roles/{role.id}/permissions",
        json={"permission": "posts.write", "expires_at": (NOW + timedelta(days=30)).isoformat()},
    )
    listed = client.simulate_get(f"/v1/roles/{role.id}/permissions")
    revoked = client.simulate_delete(f"/v1/roles/{role.id}/permissions/{permission.id}")

    assert assigned.status_code == 201
    assert assigned.json["is_temporary"] is True
    assert [rp["permission_id"] for rp in listed.json["items"]] == [str(permission.id)]
    assert revoked.status_code == 204
    assert client.simulate_get(f"/v1/roles/{role.id}/permissions").json["items"] == []


def test_assign_unknown_permission_returns_404(client, fake_uow) -> None:
    role = fake_uow.add_role("Author")
    result = client.simulate_post(
        f"/v1/roles/{role.id}/permissions", json={"permission": "posts.publish"}
    )
    assert result.status_code == 404


def test_delete_role(client, fake_uow) -> None:
    guest = fake_uow.add_role("Guest")
    system = fake_uow.add_role("User", is_system=True)

    assert client.simulate_delete(f"/v1/roles/{guest.id}").status_code == 204
    assert client.simulate_delete(f"/v1/roles/{system.id}").status_code == 400


def test_governance_denied_returns_403(client, mock_permission_checker) -> None:
    mock_permission_checker.check.return_value = False
    result = client.simulate_delete(f"/v1/roles/{uuid4()}")
    assert result.status_code == 403


# --- configuration ---


def test_configuration_workflow(client) -> None:
    created = client.simulate_post(
        "/v1/config",
        json={
            "section": "comments",
            "key": "max_length",
            "value": "500",
            "data_type": "int",
            "criticality": "high",
        },
    )
    assert created.status_code == 201
    assert created.json["criticality"] == "High"
    assert created.json["requires_approval"] is True
    config_id = created.json["id"]

    proposed = client.simulate_post(
        f"/v1/config/{config_id}/propose", json={"value": "800", "reason": "longer comments"}
    )
    assert proposed.status_code == 201
    assert proposed.json["approval_status"] == "pending"

    approved = client.simulate_post(
        f"/v1/config/versions/{proposed.json['id']}/approve", json={"notes": "ok"}
    )
    assert approved.status_code == 200
    assert approved.json["is_current"] is True

    again = client.simulate_post(f"/v1/config/versions/{proposed.json['id']}/reject")
    assert again.status_code == 409
    assert again.json["type"] == "GovernanceError"

    rolled_back = client.simulate_post(
        f"/v1/config/{config_id}/rollback", json={"target_version": 1}
    )
    assert rolled_back.status_code == 201
    assert rolled_back.json["version"] == 3
    assert rolled_back.json["value"] == "500"
    assert rolled_back.json["change_type"] == "rollback"

    versions = client.simulate_get(f"/v1/config/{config_id}/versions")
    assert [v["version"] for v in versions.json["items"]] == [3, 2, 1]
    assert all(v["is_intact"] for v in versions.json["items"])


def test_propose_non_string_value_returns_400(client) -> None:
    created = client.simulate_post(
        "/v1/config", json={"section": "blog", "key": "title", "value": "Quill"}
    )
    result = client.simulate_post(
        f"/v1/config/{created.json['id']}/propose", json={"value": 5}
    )
    assert result.status_code == 400


def test_rollback_requires_integer_target(client) -> None:
    result = client.simulate_post(
        f"/v1/config/{uuid4()}/rollback", json={"target_version": "1"}
    )
    assert result.status_code == 400


def test_invalid_criticality_returns_400(client) -> None:
    result = client.simulate_post(
        "/v1/config", json={"section": "blog", "key": "title", "criticality": "extreme"}
    )
    assert result.status_code == 400


def test_read_configuration_by_id_and_key(client) -> None:
    created = client.simulate_post(
        "/v1/config", json={"section": "blog", "key": "title", "value": "Quill"}
    )
    config_id = created.json["id"]

    by_id = client.simulate_get(f"/v1/config/{config_id}")
    by_key = client.simulate_get("/v1/config", params={"section": "blog", "key": "title"})

    assert by_id.status_code == 200
    assert by_id.json["value"] == "Quill"
    assert by_key.json["id"] == config_id
    assert client.simulate_get(f"/v1/config/{uuid4()}").status_code == 404
    assert client.simulate_get("/v1/config", params={"section": "blog"}).status_code == 400


def test_pending_approvals_oldest_first(client, clock) -> None:
    created = client.simulate_post(
        "/v1/config",
        json={"section": "comments", "key": "max_length", "value": "500", "criticality": "high"},
    )
    other = client.simulate_post(
        "/v1/config",
        json={"section": "comments", "key": "per_page", "value": "20", "criticality": "critical"},
    )
    first = client.simulate_post(
        f"/v1/config/{created.json['id']}/propose", json={"value": "800"}
    )
    clock.now = NOW + timedelta(minutes=5)
    second = client.simulate_post(f"/v1/config/{other.json['id']}/propose", json={"value": "50"})

    pending = client.simulate_get("/v1/config/pending-approvals")
    narrowed = client.simulate_get(
        "/v1/config/pending-approvals", params={"config_id": other.json["id"]}
    )

    assert pending.status_code == 200
    assert [v["id"] for v in pending.json["items"]] == [first.json["id"], second.json["id"]]
    assert [v["id"] for v in narrowed.json["items"]] == [second.json["id"]]


# --- audit logs ---


def test_audit_logs_list_and_archive(client, clock) -> None:
    client.simulate_post(
        "/v1/permissions/check", json={"resource_type": "posts", "operation": "read"}
    )

    listed = client.simulate_get("/v1/audit-logs", params={"user_id": TEST_USER_ID})
    clock.now = NOW + timedelta(minutes=1)
    archived = client.simulate_post(
        "/v1/audit-logs/archive", json={"before": (NOW + timedelta(seconds=1)).isoformat()}
    )

    assert listed.status_code == 200
    assert listed.json["items"][0]["action"] == "PermissionCheck"
    assert listed.json["items"][0]["result"] == "Failure"
    assert listed.json["next_cursor"] is None
    assert archived.status_code == 200
    assert archived.json["archived"] == 1


def test_audit_report_counts_entries_in_range(client) -> None:
    client.simulate_post(
        "/v1/permissions/check", json={"resource_type": "posts", "operation": "read"}
    )

    report = client.simulate_get(
        "/v1/audit-logs/report",
        params={
            "start": (NOW - timedelta(hours=1)).isoformat(),
            "end": (NOW + timedelta(hours=1)).isoformat(),
        },
    )
    later = client.simulate_get(
        "/v1/audit-logs/report",
        params={
            "start": (NOW + timedelta(hours=1)).isoformat(),
            "end": (NOW + timedelta(hours=2)).isoformat(),
        },
    )

    assert report.status_code == 200
    assert report.json["total"] == 1
    assert report.json["by_category"] == {"Authorization": 1}
    assert report.json["by_result"] == {"Failure": 1}
    assert later.json["total"] == 0


def test_audit_report_rejects_reversed_range(client) -> None:
    result = client.simulate_get(
        "/v1/audit-logs/report",
        params={"start": NOW.isoformat(), "end": (NOW - timedelta(hours=1)).isoformat()},
    )
    assert result.status_code == 400


def test_audit_report_requires_range(client) -> None:
    assert client.simulate_get("/v1/audit-logs/report").status_code == 400


def test_unexpected_error_returns_500(client, mock_permission_checker) -> None:
    mock_permission_checker.check.side_effect = RuntimeError("database exploded")
    result = client.simulate_get("/v1/audit-logs")
    assert result.status_code == 500
    assert result.json == {"error": "Internal server error"}


def test_check_uses_operation_enum(client, fake_uow) -> None:
    admin = fake_uow.add_role("Admin", "posts.admin")
    fake_uow.users._by_id[TEST_USER_ID].role_ids = [admin.id]

    for operation in PermissionAction:
        result = client.simulate_post(
            "/v1/permissions/check",
            json={"resource_type": "posts", "operation": operation.value.upper()},
        )
        assert result.json["allowed"] is True
