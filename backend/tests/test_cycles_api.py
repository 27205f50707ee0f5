import pytest


def get_data(response):
    return response.get_json()["data"]


class TestCreateCycle:
    def test_first_cycle(self, make_cycle):
        cycle = make_cycle("2025-10-01")
        assert cycle["cycle_number"] == 1
        assert cycle["is_active"] is True
        assert cycle["start_date"] == "2025-10-01"
        assert cycle["end_date"] is None
        assert cycle["days"] == []

    def test_new_cycle_closes_active_cycle_without_days(self, client, auth_headers, make_cycle):
        first = make_cycle("2025-10-01")
        second = make_cycle("2025-10-29")
        assert second["cycle_number"] == 2

        previous = get_data(client.get(f"/api/cycles/{first['id']}", headers=auth_headers))["cycle"]
        assert previous["is_active"] is False
        assert previous["end_date"] == "2025-10-28"

    def test_new_cycle_closes_active_cycle_on_last_recorded_day(self, client, auth_headers, make_cycle, add_day):
        first = make_cycle("2025-10-01")
        add_day(first["id"], date="2025-10-20", bbt=97.6)
        make_cycle("2025-10-29")

        previous = get_data(client.get(f"/api/cycles/{first['id']}", headers=auth_headers))["cycle"]
        assert previous["end_date"] == "2025-10-20"

    def test_end_date_never_precedes_start(self, client, auth_headers, make_cycle):
        first = make_cycle("2025-10-10")
        make_cycle("2025-10-01")

        previous = get_data(client.get(f"/api/cycles/{first['id']}", headers=auth_headers))["cycle"]
        assert previous["end_date"] == "2025-10-10"

    def test_first_day_is_recorded(self, make_cycle):
        cycle = make_cycle("2025-10-01", first_day={
            "bbt": 36.5,
            "temperature_unit": "CELSIUS",
            "menstrual_flow": "heavy",
        })
        assert len(cycle["days"]) == 1
        day = cycle["days"][0]
        assert day["day_number"] == 1
        assert day["bbt"] == pytest.approx(97.7)
        assert day["menstrual_flow"] == "HEAVY"

    def test_empty_first_day_records_nothing(self, make_cycle):
        cycle = make_cycle("2025-10-01", first_day={"bbt": None, "had_intercourse": False})
        assert cycle["days"] == []

    def test_invalid_first_day_bbt_creates_nothing(self, client, auth_headers, make_cycle):
        make_cycle("2025-09-01")
        response = client.post("/api/cycles", json={
            "start_date": "2025-10-01",
            "first_day": {"bbt": 50},
        }, headers=auth_headers)
        assert response.status_code == 400
        assert "between 95°F and 105°F" in response.get_json()["error"]

        cycles = get_data(client.get("/api/cycles", headers=auth_headers))["cycles"]
        assert len(cycles) == 1
        assert cycles[0]["is_active"] is True

    def test_invalid_payload(self, client, auth_headers):
        response = client.post("/api/cycles", json={"start_date": "01/10/2025"}, headers=auth_headers)
        assert response.status_code == 400
        assert "start_date" in response.get_json()["details"]


class TestListCycles:
    def test_newest_first(self, client, auth_headers, make_cycle):
        make_cycle("2025-09-01")
        make_cycle("2025-10-01")
        cycles = get_data(client.get("/api/cycles", headers=auth_headers))["cycles"]
        assert [cycle["cycle_number"] for cycle in cycles] == [2, 1]

    def test_only_own_cycles(self, client, other_auth_headers, make_cycle):
        make_cycle("2025-10-01")
        data = get_data(client.get("/api/cycles", headers=other_auth_headers))
        assert data["count"] == 0

    def test_ended_cycles_are_normalized_to_last_day(self, client, auth_headers, make_cycle, add_day):
        cycle = make_cycle("2025-10-01")
        add_day(cycle["id"], date="2025-10-05", bbt=97.5)
        client.post(f"/api/cycles/{cycle['id']}/end", json={"end_date": "2025-10-30"}, headers=auth_headers)

        cycles = get_data(client.get("/api/cycles", headers=auth_headers))["cycles"]
        assert cycles[0]["end_date"] == "2025-10-05"

    def test_active_cycle(self, client, auth_headers, make_cycle):
        assert get_data(client.get("/api/cycles/active", headers=auth_headers))["cycle"] is None

        make_cycle("2025-09-01")
        second = make_cycle("2025-10-01")
        active = get_data(client.get("/api/cycles/active", headers=auth_headers))["cycle"]
        assert active["id"] == second["id"]


class TestGetCycle:
    def test_detail_with_suggestion_and_neighbours(self, client, auth_headers, make_cycle, add_day):
        first = make_cycle("2025-09-01")
        second = make_cycle("2025-10-01")
        third = make_cycle("2025-10-29")
        add_day(second["id"], date="2025-10-03", bbt=97.5)

        data = get_data(client.get(f"/api/cycles/{second['id']}", headers=auth_headers))
        assert data["suggested_day_number"] == 4
        assert data["previous_cycle"] == {"id": third["id"], "cycle_number": 3}
        assert data["next_cycle"] == {"id": first["id"], "cycle_number": 1}

    def test_other_users_cycle_is_not_found(self, client, other_auth_headers, make_cycle):
        cycle = make_cycle("2025-10-01")
        response = client.get(f"/api/cycles/{cycle['id']}", headers=other_auth_headers)
        assert response.status_code == 404
        assert response.get_json()["error"] == "Cycle not found"


class TestUpdateCycle:
    def test_partial_update(self, client, auth_headers, make_cycle):
        cycle = make_cycle("2025-10-01")
        response = client.patch(f"/api/cycles/{cycle['id']}", json={"end_date": "2025-10-28"}, headers=auth_headers)
        updated = get_data(response)["cycle"]
        assert updated["end_date"] == "2025-10-28"
        assert updated["start_date"] == "2025-10-01"
        assert updated["is_active"] is True

    def test_null_clears_end_date(self, client, auth_headers, make_cycle):
        cycle = make_cycle("2025-10-01")
        client.patch(f"/api/cycles/{cycle['id']}", json={"end_date": "2025-10-28"}, headers=auth_headers)
        response = client.patch(f"/api/cycles/{cycle['id']}", json={"end_date": None}, headers=auth_headers)
        assert get_data(response)["cycle"]["end_date"] is None

    def test_end_before_existing_start(self, client, auth_headers, make_cycle):
        cycle = make_cycle("2025-10-10")
        response = client.patch(f"/api/cycles/{cycle['id']}", json={"end_date": "2025-10-01"}, headers=auth_headers)
        assert response.status_code == 400

    def test_empty_update(self, client, auth_headers, make_cycle):
        cycle = make_cycle("2025-10-01")
        response = client.patch(f"/api/cycles/{cycle['id']}", json={}, headers=auth_headers)
        assert response.status_code == 400


class TestEndAndDelete:
    def test_end_cycle(self, client, auth_headers, make_cycle):
        cycle = make_cycle("2025-10-01")
        response = client.post(f"/api/cycles/{cycle['id']}/end", json={"end_date": "2025-10-27"}, headers=auth_headers)
        ended = get_data(response)["cycle"]
        assert ended["is_active"] is False
        assert ended["end_date"] == "2025-10-27"

    def test_end_before_start(self, client, auth_headers, make_cycle):
        cycle = make_cycle("2025-10-10")
        response = client.post(f"/api/cycles/{cycle['id']}/end", json={"end_date": "2025-10-01"}, headers=auth_headers)
        assert response.status_code == 400
        assert "before the cycle start date" in response.get_json()["error"]

    def test_end_requires_date(self, client, auth_headers, make_cycle):
        cycle = make_cycle("2025-10-01")
        response = client.post(f"/api/cycles/{cycle['id']}/end", json={}, headers=auth_headers)
        assert response.status_code == 400

    def test_delete_removes_days(self, app, client, auth_headers, make_cycle, add_day):
        from bbt_tracker.models import CycleDay

        cycle = make_cycle("2025-10-01")
        add_day(cycle["id"], date="2025-10-02", bbt=97.5)

        response = client.delete(f"/api/cycles/{cycle['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/cycles/{cycle['id']}", headers=auth_headers).status_code == 404
        assert CycleDay.query.filter_by(cycle_id=cycle["id"]).count() == 0


class TestCycleLookups:
    def test_get_cycle_days_in_day_order(self, app, make_cycle, add_day):
        from bbt_tracker.services.cycle_service import CycleService

        cycle = make_cycle("2025-10-01")
        add_day(cycle["id"], date="2025-10-05", bbt=97.6)
        add_day(cycle["id"], date="2025-10-02", bbt=97.5)

        days = CycleService.get_cycle_days(cycle["user_id"], cycle["id"])
        assert [day.day_number for day in days] == [2, 5]
        assert CycleService.get_cycle(cycle["user_id"], cycle["id"]).id == cycle["id"]

    def test_lookups_are_scoped_to_the_owner(self, app, make_cycle):
        from bbt_tracker.services.cycle_service import CycleService

        cycle = make_cycle("2025-10-01")
        with pytest.raises(ValueError, match="Cycle not found"):
            CycleService.get_cycle(cycle["user_id"] + 1, cycle["id"])
        with pytest.raises(ValueError, match="Cycle not found"):
            CycleService.get_cycle_days(cycle["user_id"] + 1, cycle["id"])
