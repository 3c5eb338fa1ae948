from doypal.models.redemption import Redemption


def _redeem(client, reward, **body):
    return client.post("/api/redemptions", json={"reward_id": str(reward.id), **body})


def test_redeem_then_withdraw_scenario(client, db, make_event, make_reward):
    make_event(points=10)
    first = make_reward(name="Movie night", point_cost=10)
    second = make_reward(name="Pizza", point_cost=10)

    res = _redeem(client, first)
    assert res.status_code == 200
    body = res.json()
    assert body["previous_balance"] == 10
    assert body["new_balance"] == 0
    assert body["points_spent"] == 10
    assert body["redemption"]["status"] == "active"

    points = client.get("/api/points").json()
    assert points["total_points"] == 10
    assert points["available_points"] == 0

    rewards = {r["name"]: r for r in client.get("/api/rewards").json()["rewards"]}
    assert rewards["Movie night"]["is_redeemed"] is True
    assert rewards["Pizza"]["is_affordable"] is False

    res = _redeem(client, second)
    assert res.status_code == 400

    redemption_id = body["redemption"]["id"]
    res = client.patch(f"/api/redemptions/{redemption_id}", json={"action": "withdraw"})
    assert res.status_code == 200
    assert res.json() == {
        "message": "Redemption withdrawn successfully",
        "points_refunded": 10,
        "reward_name": "Movie night",
    }

    stored = client.get(f"/api/redemptions/{redemption_id}").json()["redemption"]
    assert stored["status"] == "withdrawn"
    assert stored["withdrawn_at"] is not None

    points = client.get("/api/points").json()
    assert points["total_points"] == 10
    assert points["available_points"] == 10


def test_insufficient_points_writes_nothing(client, db, make_event, make_reward):
    make_event(points=4)
    reward = make_reward(point_cost=10)

    res = _redeem(client, reward)

    assert res.status_code == 400
    assert res.json() == {"error": "Insufficient points", "required": 10, "current": 4, "needed": 6}
    assert db.query(Redemption).count() == 0


def test_withdraw_refunds_snapshot_after_cost_change(client, db, make_event, make_reward):
    make_event(points=50)
    reward = make_reward(point_cost=10)
    redemption_id = _redeem(client, reward).json()["redemption"]["id"]

    res = client.patch(f"/api/rewards/{reward.id}", data={"point_cost": "30"})
    assert res.status_code == 200

    res = client.patch(f"/api/redemptions/{redemption_id}", json={"action": "withdraw"})

    assert res.json()["points_refunded"] == 10


def test_double_withdraw_rejected(client, db, make_event, make_reward):
    make_event(points=10)
    reward = make_reward(point_cost=10)
    redemption_id = _redeem(client, reward).json()["redemption"]["id"]

    client.patch(f"/api/redemptions/{redemption_id}", json={"action": "withdraw"})
    res = client.patch(f"/api/redemptions/{redemption_id}", json={"action": "withdraw"})

    assert res.status_code == 400
    assert res.json() == {"error": "Redemption already withdrawn"}
    assert db.query(Redemption).filter(Redemption.status == "withdrawn").count() == 1


def test_invalid_action(client, make_event, make_reward):
    make_event(points=10)
    reward = make_reward(point_cost=5)
    redemption_id = _redeem(client, reward).json()["redemption"]["id"]

    res = client.patch(f"/api/redemptions/{redemption_id}", json={"action": "refund"})

    assert res.status_code == 400
    assert res.json() == {"error": "Invalid action. Only 'withdraw' is supported"}


def test_missing_reward_id(client):
    res = client.post("/api/redemptions", json={})

    assert res.status_code == 400
    assert res.json() == {"error": "Missing required field: reward_id"}


def test_inactive_reward_not_redeemable(client, make_event, make_reward):
    make_event(points=10)
    reward = make_reward(point_cost=5, is_active=False)

    res = _redeem(client, reward)

    assert res.status_code == 404
    assert res.json() == {"error": "Reward not found or inactive"}


def test_unknown_redemption(client):
    res = client.patch("/api/redemptions/00000000-0000-0000-0000-000000000000", json={"action": "withdraw"})

    assert res.status_code == 404


def test_profile_scoped_balance(client, make_profile, make_event, make_reward):
    alex = make_profile("Alex")
    sam = make_profile("Sam")
    make_event(points=10, profile_id=alex.id)
    make_event(points=2, profile_id=sam.id)
    reward = make_reward(point_cost=5)

    assert _redeem(client, reward, profile_id=str(sam.id)).status_code == 400

    res = _redeem(client, reward, profile_id=str(alex.id))
    assert res.status_code == 200
    assert res.json()["redemption"]["profile_id"] == str(alex.id)

    listed = client.get("/api/redemptions", params={"profile_id": str(sam.id)}).json()
    assert listed["redemptions"] == []


def test_unknown_profile_rejected(client, make_event, make_reward):
    make_event(points=10)
    reward = make_reward(point_cost=5)

    res = _redeem(client, reward, profile_id="00000000-0000-0000-0000-000000000000")

    assert res.status_code == 404
    assert res.json() == {"error": "Profile not found"}


def test_list_excludes_withdrawn_by_default(client, make_event, make_reward):
    make_event(points=20)
    reward = make_reward(point_cost=5)
    kept = _redeem(client, reward).json()["redemption"]["id"]
    dropped = _redeem(client, reward).json()["redemption"]["id"]
    client.patch(f"/api/redemptions/{dropped}", json={"action": "withdraw"})

    active = client.get("/api/redemptions").json()["redemptions"]
    everything = client.get("/api/redemptions", params={"include_withdrawn": "true"}).json()["redemptions"]

    assert [r["id"] for r in active] == [kept]
    assert {r["id"] for r in everything} == {kept, dropped}
    assert active[0]["reward"]["name"] == "Ice cream"
