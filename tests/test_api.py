from hostel_complaints.models.base.enums import StaffCategory

from doubles import image_bytes

COMPLAINTS = "/api/v1/complaints"
ADMIN_COMPLAINTS = "/api/v1/admin/complaints"
STAFF = "/api/v1/admin/staff"
ASSIGNMENT = "/api/v1/admin/assignment"

PLUMBING_FORM = {
    "category": "Maintenance",
    "sub_category": "Plumbing",
    "description": "Water leaking from the bathroom tap",
}


def submit(client, headers, form=None, files=None):
    return client.post(COMPLAINTS, data=form or PLUMBING_FORM, files=files, headers=headers)


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_submit_complaint(client, auth_headers, student):
    response = submit(client, auth_headers(student))

    body = response.json()
    assert response.status_code == 201
    assert body["success"] is True
    assert body["data"]["status"] == "Received"
    assert body["data"]["sub_category"] == "Plumbing"
    assert body["metadata"]["assignment"] is None


def test_submit_with_image(client, auth_headers, student, image_store):
    files = {"image": ("leak.jpg", image_bytes("JPEG"), "image/jpeg")}

    response = submit(client, auth_headers(student), files=files)

    image_url = response.json()["data"]["image_url"]
    assert response.status_code == 201
    assert image_url.startswith("/uploads/")
    assert (image_store.base_dir / image_url.rsplit("/", 1)[-1]).exists()


def test_submit_rejects_bad_pairing(client, auth_headers, student):
    form = {"category": "Canteen", "sub_category": "Plumbing", "description": "Food was served cold"}

    response = submit(client, auth_headers(student), form=form)

    body = response.json()
    assert response.status_code == 422
    assert body["success"] is False
    assert body["metadata"]["error_code"] == "VALIDATION_ERROR"
    assert "sub_category" in body["metadata"]["details"]["field_errors"]


def test_missing_token_is_unauthorized(client):
    response = submit(client, {})

    assert response.status_code == 401
    assert response.json()["metadata"]["error_code"] == "AUTHENTICATION_FAILED"


def test_garbage_token_is_unauthorized(client):
    response = client.get(f"{COMPLAINTS}/my", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_wrong_role_is_forbidden(client, auth_headers, warden, student):
    assert submit(client, auth_headers(warden)).status_code == 403
    assert client.get(ADMIN_COMPLAINTS, headers=auth_headers(student)).status_code == 403


def test_students_cannot_read_each_other(client, auth_headers, student, other_student):
    complaint_id = submit(client, auth_headers(student)).json()["data"]["id"]

    assert client.get(f"{COMPLAINTS}/{complaint_id}", headers=auth_headers(student)).status_code == 200
    assert client.get(f"{COMPLAINTS}/{complaint_id}", headers=auth_headers(other_student)).status_code == 404
    assert client.get(f"{COMPLAINTS}/my", headers=auth_headers(other_student)).json()["data"] == []


def test_admin_listing_filters(client, auth_headers, student, warden):
    submit(client, auth_headers(student))

    response = client.get(ADMIN_COMPLAINTS, params={"status": "Active", "limit": 5}, headers=auth_headers(warden))

    body = response.json()
    assert response.status_code == 200
    assert len(body["data"]) == 1
    assert body["metadata"]["pagination"]["limit"] == 5
    assert body["metadata"]["counts"]["active"] == 1


def test_admin_listing_rejects_unknown_status(client, auth_headers, warden):
    response = client.get(ADMIN_COMPLAINTS, params={"status": "Archived"}, headers=auth_headers(warden))

    assert response.status_code == 422


def test_full_lifecycle_over_http(client, auth_headers, make_staff, student, warden):
    plumber = make_staff(name="Ravi Kumar")
    complaint_id = submit(client, auth_headers(student)).json()["data"]["id"]

    assigned = client.put(
        f"{ADMIN_COMPLAINTS}/{complaint_id}/status",
        json={"status": "In Progress", "staff_id": plumber.id},
        headers=auth_headers(warden),
    )
    assert assigned.status_code == 200
    assert assigned.json()["data"]["assigned_staff"]["name"] == "Ravi Kumar"

    resolved = client.put(
        f"{ADMIN_COMPLAINTS}/{complaint_id}/status",
        json={"status": "Resolved", "expected_version": assigned.json()["data"]["version"]},
        headers=auth_headers(warden),
    )
    assert resolved.status_code == 200

    feedback = client.post(
        f"{COMPLAINTS}/{complaint_id}/feedback",
        json={"is_satisfied": True},
        headers=auth_headers(student),
    )
    assert feedback.status_code == 200
    assert feedback.json()["data"]["is_locked"] is True

    blocked = client.put(
        f"{ADMIN_COMPLAINTS}/{complaint_id}/status",
        json={"status": "Pending"},
        headers=auth_headers(warden),
    )
    assert blocked.status_code == 409
    assert blocked.json()["metadata"]["error_code"] == "COMPLAINT_LOCKED"

    timeline = client.get(f"{COMPLAINTS}/{complaint_id}/timeline", headers=auth_headers(student))
    statuses = [e["status"] for e in timeline.json()["data"]["entries"]]
    assert statuses == ["Received", "In Progress", "Resolved", "Resolved"]


def test_warden_cannot_close(client, auth_headers, student, warden):
    complaint_id = submit(client, auth_headers(student)).json()["data"]["id"]

    response = client.put(
        f"{ADMIN_COMPLAINTS}/{complaint_id}/status",
        json={"status": "Closed"},
        headers=auth_headers(warden),
    )

    assert response.status_code == 403


def test_delete_requires_admin(client, auth_headers, student, warden, super_admin):
    complaint_id = submit(client, auth_headers(student)).json()["data"]["id"]

    assert client.delete(f"{ADMIN_COMPLAINTS}/{complaint_id}", headers=auth_headers(warden)).status_code == 403
    assert client.delete(f"{ADMIN_COMPLAINTS}/{complaint_id}", headers=auth_headers(super_admin)).status_code == 200
    assert client.get(f"{ADMIN_COMPLAINTS}/{complaint_id}", headers=auth_headers(warden)).status_code == 404


def test_staff_directory(client, auth_headers, super_admin):
    headers = auth_headers(super_admin)

    invalid = client.post(STAFF, json={"name": "Ravi", "phone": "12345", "category": "Plumbing"}, headers=headers)
    assert invalid.status_code == 422

    ids = []
    for name in ("First Cook", "Second Cook"):
        created = client.post(
            STAFF,
            json={"name": name, "phone": "9876543210", "category": "Canteen", "category_expertise": {"Canteen": 70}},
            headers=headers,
        )
        assert created.status_code == 201
        ids.append(created.json()["data"]["id"])

    listed = client.get(f"{STAFF}/category/{StaffCategory.CANTEEN.value}", headers=headers)
    assert listed.json()["metadata"]["count"] == 2

    blocked = client.delete(f"{STAFF}/{ids[0]}", headers=headers)
    assert blocked.status_code == 400
    assert blocked.json()["metadata"]["error_code"] == "BUSINESS_RULE_VIOLATION"

    updated = client.put(f"{STAFF}/{ids[0]}", json={"name": "Head Cook"}, headers=headers)
    assert updated.json()["data"]["name"] == "Head Cook"


def test_staff_directory_is_admin_only(client, auth_headers, warden):
    assert client.get(STAFF, headers=auth_headers(warden)).status_code == 403


def test_assignment_configuration(client, auth_headers, super_admin, make_staff, student):
    headers = auth_headers(super_admin)

    initial = client.get(f"{ASSIGNMENT}/config", headers=headers).json()["data"]
    assert initial["enabled_globally"] is False

    enabled = client.post(f"{ASSIGNMENT}/quick-setup", headers=headers).json()["data"]
    assert enabled["enabled_globally"] is True
    assert enabled["category_settings"]["Canteen"] == {"enabled": True, "auto_assign": True}

    saved = client.put(
        f"{ASSIGNMENT}/config",
        json={"max_workload": 3, "category_settings": {"Internet": {"auto_assign": False}}},
        headers=headers,
    ).json()["data"]
    assert saved["max_workload"] == 3
    assert saved["category_settings"]["Internet"] == {"enabled": True, "auto_assign": False}

    assert client.put(f"{ASSIGNMENT}/config", json={"max_workload": 0}, headers=headers).status_code == 422

    cook = make_staff(name="Only Cook", category=StaffCategory.CANTEEN)
    created = submit(
        client,
        auth_headers(student),
        form={"category": "Canteen", "description": "Dinner was served cold again"},
    ).json()
    assert created["data"]["assigned_staff_id"] == cook.id
    assert created["data"]["status"] == "In Progress"

    stats = client.get(f"{ASSIGNMENT}/stats", headers=headers).json()["data"]
    assert stats["auto_processed"] == 1
    assert stats["success_rate"] == 100.0

    toggled = client.post(f"{ASSIGNMENT}/toggle", json={"enabled": False}, headers=headers).json()["data"]
    assert toggled["enabled_globally"] is False

    efficiency = client.put(f"{ASSIGNMENT}/members/{cook.id}/efficiency", headers=headers)
    assert efficiency.status_code == 200
    assert efficiency.json()["data"]["current_workload"] == 1


def test_manual_assignment_trigger(client, auth_headers, super_admin, make_staff, student):
    headers = auth_headers(super_admin)
    complaint_id = submit(client, auth_headers(student)).json()["data"]["id"]

    disabled = client.post(f"{ADMIN_COMPLAINTS}/{complaint_id}/assign", headers=headers)
    assert disabled.status_code == 400

    plumber = make_staff(name="Ravi Kumar")
    client.post(f"{ASSIGNMENT}/quick-setup", headers=headers)
    assigned = client.post(f"{ADMIN_COMPLAINTS}/{complaint_id}/assign", headers=headers)

    assert assigned.status_code == 200
    assert assigned.json()["data"]["staff_id"] == plumber.id
