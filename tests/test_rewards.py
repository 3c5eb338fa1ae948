from io import BytesIO

import pytest
from fastapi import HTTPException, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import Headers

from doypal.models.reward import Reward
from doypal.services import reward_service
from doypal.storage import MAX_IMAGE_BYTES

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_create_reward_with_image(client, storage):
    res = client.post(
        "/api/rewards",
        data={"name": "Ice cream", "description": "One scoop", "point_cost": "10"},
        files={"image": ("scoop.png", PNG, "image/png")},
    )

    assert res.status_code == 200
    reward = res.json()["reward"]
    assert reward["point_cost"] == 10
    assert reward["image_url"].startswith("https://images.test/reward-images/reward-")
    assert reward["image_url"].endswith(".png")
    assert len(storage.objects) == 1


def test_create_reward_requires_name_and_cost(client):
    res = client.post("/api/rewards", data={"name": "Ice cream", "point_cost": "0"})

    assert res.status_code == 400
    assert res.json() == {"error": "Missing required fields: name and valid point_cost"}


def test_image_too_large(client, storage):
    res = client.post(
        "/api/rewards",
        data={"name": "Ice cream", "point_cost": "10"},
        files={"image": ("big.png", b"\x00" * (1024 * 1024 + 1), "image/png")},
    )

    assert res.status_code == 400
    assert res.json() == {"error": "Image size must be less than 1MB"}
    assert storage.objects == {}


def test_image_type_rejected(client):
    res = client.post(
        "/api/rewards",
        data={"name": "Ice cream", "point_cost": "10"},
        files={"image": ("anim.gif", b"GIF89a", "image/gif")},
    )

    assert res.status_code == 400
    assert res.json() == {"error": "Image must be JPEG, PNG, or WebP format"}


def test_upload_failure(client, storage):
    storage.fail_upload = True

    res = client.post(
        "/api/rewards",
        data={"name": "Ice cream", "point_cost": "10"},
        files={"image": ("scoop.png", PNG, "image/png")},
    )

    assert res.status_code == 500
    assert res.json() == {"error": "Failed to upload image"}


def test_failed_insert_removes_uploaded_image(client, storage, monkeypatch):
    def broken_commit(self):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(Session, "commit", broken_commit)

    res = client.post(
        "/api/rewards",
        data={"name": "Ice cream", "point_cost": "10"},
        files={"image": ("scoop.png", PNG, "image/png")},
    )

    assert res.status_code == 500
    assert res.json() == {"error": "Database error"}
    assert len(storage.removed) == 1
    assert storage.objects == {}


def test_replacing_image_removes_old_object(client, storage, make_reward):
    reward = make_reward(image_url="https://images.test/reward-images/reward-1-abcdef.png")

    res = client.patch(
        f"/api/rewards/{reward.id}",
        data={"name": "Frozen yogurt"},
        files={"image": ("new.webp", PNG, "image/webp")},
    )

    assert res.status_code == 200
    body = res.json()["reward"]
    assert body["name"] == "Frozen yogurt"
    assert body["image_url"].endswith(".webp")
    assert storage.removed == ["reward-1-abcdef.png"]


def test_list_rewards_sorted_by_cost_with_status(client, make_event, make_reward):
    make_event(points=12)
    make_reward(name="Pizza", point_cost=20)
    make_reward(name="Sticker", point_cost=2)
    make_reward(name="Hidden", point_cost=1, is_active=False)

    body = client.get("/api/rewards").json()

    assert body["available_points"] == 12
    assert [(r["name"], r["is_affordable"]) for r in body["rewards"]] == [("Sticker", True), ("Pizza", False)]
    assert all(r["is_redeemed"] is False for r in body["rewards"])


def test_delete_deactivates_reward(client, db, make_reward):
    reward = make_reward()

    res = client.delete(f"/api/rewards/{reward.id}")

    assert res.json() == {"message": "Reward deactivated successfully"}
    db.expire_all()
    assert db.get(Reward, reward.id).is_active is False
    assert client.get("/api/rewards").json()["rewards"] == []


def test_unknown_reward(client):
    res = client.get("/api/rewards/00000000-0000-0000-0000-000000000000")

    assert res.status_code == 404
    assert res.json() == {"error": "Reward not found"}


def test_failed_update_keeps_previous_image(client, db, storage, make_reward, monkeypatch):
    old_url = "https://images.test/reward-images/reward-1-abcdef.png"
    reward = make_reward(image_url=old_url)

    def broken_commit(self):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(Session, "commit", broken_commit)

    res = client.patch(
        f"/api/rewards/{reward.id}",
        files={"image": ("new.png", PNG, "image/png")},
    )

    assert res.status_code == 500
    assert storage.objects == {}
    assert len(storage.removed) == 1
    assert storage.removed[0] != "reward-1-abcdef.png"

    monkeypatch.undo()
    db.expire_all()
    assert db.get(Reward, reward.id).image_url == old_url


def test_oversized_upload_read_is_bounded(db, storage):
    class RecordingFile(BytesIO):
        def __init__(self, data):
            super().__init__(data)
            self.sizes = []

        def read(self, size=-1):
            self.sizes.append(size)
            return super().read(size)

    upload_file = RecordingFile(b"\x00" * (3 * MAX_IMAGE_BYTES))
    image = UploadFile(upload_file, filename="huge.png", headers=Headers({"content-type": "image/png"}))

    with pytest.raises(HTTPException) as exc:
        reward_service.create_reward(db, storage, name="Ice cream", description=None, point_cost=10, image=image)

    assert exc.value.status_code == 400
    assert upload_file.sizes == [MAX_IMAGE_BYTES + 1]
