import uuid

from doypal.models.template import Template
from doypal.services.template_service import record_template_use


def test_create_and_list_by_frequency(client, make_template):
    make_template(name="Dishes", frequency=1)
    make_template(name="Homework", frequency=9)

    res = client.post(
        "/api/templates",
        json={"name": " Reading ", "description": "Read a book", "default_points": 3, "frequency": 4},
    )

    assert res.status_code == 200
    assert res.json()["template"]["name"] == "Reading"
    names = [t["name"] for t in client.get("/api/templates").json()["templates"]]
    assert names == ["Homework", "Reading", "Dishes"]


def test_create_requires_fields(client):
    res = client.post("/api/templates", json={"name": "Reading"})

    assert res.status_code == 400
    assert res.json() == {"error": "Missing required fields: name, description, default_points"}


def test_default_points_bounds(client, make_template):
    template = make_template()

    res = client.patch(f"/api/templates/{template.id}", json={"default_points": 101})

    assert res.status_code == 400
    assert res.json() == {"error": "Default points must be between 1 and 100"}


def test_update_rejects_blank_name(client, make_template):
    template = make_template()

    res = client.patch(f"/api/templates/{template.id}", json={"name": "  "})

    assert res.status_code == 400
    assert res.json() == {"error": "Template name cannot be empty"}


def test_soft_delete(client, db, make_template):
    template = make_template()

    res = client.delete(f"/api/templates/{template.id}")

    assert res.status_code == 200
    assert client.get("/api/templates").json()["templates"] == []
    db.expire_all()
    assert db.get(Template, template.id).is_active is False


def test_record_template_use_is_single_update(db, make_template):
    template = make_template(frequency=4)

    assert record_template_use(db, template.id) is True
    assert record_template_use(db, template.id) is True
    db.commit()
    db.expire_all()

    assert db.get(Template, template.id).frequency == 6


def test_record_template_use_unknown(db):
    assert record_template_use(db, uuid.UUID(int=0)) is False
