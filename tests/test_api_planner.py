import pytest
from fastapi.testclient import TestClient

import studyplanner.app as planner_app
from studyplanner.services.data_store import data_store


@pytest.fixture()
def api_client(tmp_path):
    original_base = data_store.base_path
    data_store.set_base_path(tmp_path)

    yield TestClient(planner_app.app)

    data_store.set_base_path(original_base)


def _create_course(client: TestClient, **overrides) -> dict:
    payload = {"name": "Intro to CS", "code": "CS 101", "credits": 3, "semester": "Fall 2024"}
    payload.update(overrides)
    response = client.post("/api/courses", json=payload)
    assert response.status_code == 200, response.text
    return response.json()


def _grade_payload(course_id: str, **overrides) -> dict:
    payload = {
        "courseId": course_id,
        "assignmentName": "Midterm",
        "grade": 85,
        "maxPoints": 100,
        "weight": 1,
        "category": "exam",
        "date": "2024-10-15",
    }
    payload.update(overrides)
    return payload


def test_course_crud(api_client):
    course = _create_course(api_client)
    assert course["id"]
    assert course["color"].startswith("#")

    response = api_client.patch(f"/api/courses/{course['id']}", json={"instructor": "Dr. Smith"})
    assert response.status_code == 200
    assert response.json()["instructor"] == "Dr. Smith"

    listed = api_client.get("/api/courses").json()
    assert [item["code"] for item in listed] == ["CS 101"]

    assert api_client.delete(f"/api/courses/{course['id']}").json() == {"ok": True}
    assert api_client.get("/api/courses").json() == []
    assert api_client.delete(f"/api/courses/{course['id']}").status_code == 404


def test_course_rules(api_client):
    assert api_client.post("/api/courses", json={"name": "X", "code": "X", "credits": 0}).status_code == 400
    assert api_client.post("/api/courses", json={"name": "X", "code": "X"}).status_code == 422

    course = _create_course(api_client)
    response = api_client.patch(f"/api/courses/{course['id']}", json={"credits": -2})
    assert response.status_code == 400
    assert api_client.get("/api/courses").json()[0]["credits"] == 3


def test_grade_rules(api_client):
    course = _create_course(api_client)

    response = api_client.post("/api/grades", json=_grade_payload(course["id"], maxPoints=0))
    assert response.status_code == 400

    response = api_client.post("/api/grades", json=_grade_payload("nope"))
    assert response.status_code == 400

    response = api_client.post("/api/grades", json=_grade_payload(course["id"], category="bonus"))
    assert response.status_code == 422

    response = api_client.patch("/api/grades/missing", json={"grade": 1})
    assert response.status_code == 404


def test_gpa_and_grade_summary(api_client):
    cs = _create_course(api_client)
    art = _create_course(api_client, name="Art", code="ART 100", credits=1)
    _create_course(api_client, name="English", code="ENG 101")

    api_client.post("/api/grades", json=_grade_payload(cs["id"], grade=100))
    api_client.post("/api/grades", json=_grade_payload(art["id"], grade=10))

    gpa = api_client.get("/api/gpa").json()
    assert gpa["overall"] == 3.0
    assert gpa["semester"] == 3.0
    assert {item["courseId"]: item["letterGrade"] for item in gpa["courses"]} == {
        cs["id"]: "A+",
        art["id"]: "F",
    }

    summary = api_client.get("/api/grades/summary").json()
    letters = {item["course"]["code"]: item["letterGrade"] for item in summary}
    assert letters == {"CS 101": "A+", "ART 100": "F", "ENG 101": "N/A"}

    filtered = api_client.get("/api/grades/summary", params={"courseId": cs["id"]}).json()
    assert len(filtered) == 1
    assert filtered[0]["grades"][0]["maxPoints"] == 100


def test_schedule_rules_and_views(api_client):
    course = _create_course(api_client)
    entry = {"courseId": course["id"], "dayOfWeek": 1, "startTime": "10:30", "endTime": "09:00"}

    assert api_client.post("/api/schedule", json=entry).status_code == 400
    assert api_client.post("/api/schedule", json={**entry, "dayOfWeek": 7}).status_code == 422

    entry.update(startTime="09:00", endTime="10:30", location="Room 101")
    assert api_client.post("/api/schedule", json=entry).status_code == 200

    assert api_client.get("/api/schedule/stats").json() == {
        "totalClasses": 1,
        "hoursPerWeek": 1.5,
        "uniqueLocations": 1,
    }
    assert len(api_client.get("/api/schedule/day/1").json()) == 1
    assert api_client.get("/api/schedule/day/2").json() == []
    assert api_client.get("/api/schedule/day/9").status_code == 400


def test_calendar_month_week_and_day(api_client):
    course = _create_course(api_client, color="#10B981")
    api_client.post(
        "/api/schedule",
        json={"courseId": course["id"], "dayOfWeek": 1, "startTime": "09:00", "endTime": "10:30"},
    )
    api_client.post(
        "/api/assignments",
        json={"courseId": course["id"], "title": "Homework 5", "dueDate": "2024-10-07T23:59:00"},
    )
    api_client.post(
        "/api/reminders",
        json={"title": "Exam prep", "date": "2024-10-07T18:00:00", "type": "exam"},
    )

    month = api_client.get("/api/calendar", params={"year": 2024, "month": 10}).json()
    classes = [event for event in month if event["type"] == "class"]
    assert len(classes) == 4
    assert classes[0]["title"] == "Intro to CS"
    assert classes[0]["color"] == "#10B981"
    assert classes[0]["start"] == "2024-10-07T09:00:00"

    week = api_client.get("/api/calendar/week", params={"date": "2024-10-09"}).json()
    assert len([event for event in week if event["type"] == "class"]) == 1

    day = api_client.get("/api/calendar/day", params={"date": "2024-10-07"}).json()
    assert [event["type"] for event in day] == ["class", "event", "assignment"]
    assert day[1]["color"] == "#F59E0B"

    assert api_client.get("/api/calendar", params={"year": 2024, "month": 13}).status_code == 400
    assert api_client.get("/api/calendar", params={"year": 2024, "month": 10}).json() == month


def test_reminder_toggle(api_client):
    created = api_client.post(
        "/api/reminders",
        json={"title": "Pay tuition", "date": "2024-10-01T09:00:00"},
    ).json()
    assert created["isCompleted"] is False

    toggled = api_client.post(f"/api/reminders/{created['id']}/toggle").json()
    assert toggled["isCompleted"] is True

    open_reminders = api_client.get("/api/reminders", params={"includeCompleted": False}).json()
    assert open_reminders == []


def test_reminder_must_reference_existing_assignment(api_client):
    response = api_client.post(
        "/api/reminders",
        json={"title": "Ghost", "date": "2024-10-01T09:00:00", "assignmentId": "missing"},
    )
    assert response.status_code == 400


def test_delete_course_cascades_through_api(api_client):
    course = _create_course(api_client)
    api_client.post("/api/grades", json=_grade_payload(course["id"]))
    api_client.post(
        "/api/assignments",
        json={"courseId": course["id"], "title": "Essay", "dueDate": "2024-11-01T12:00:00"},
    )

    api_client.delete(f"/api/courses/{course['id']}")

    assert api_client.get("/api/grades").json() == []
    assert api_client.get("/api/assignments").json() == []
    assert api_client.get("/api/gpa").json() == {"overall": 0.0, "semester": 0.0, "courses": []}


def test_dashboard_payload(api_client):
    course = _create_course(api_client)
    api_client.post(
        "/api/assignments",
        json={"courseId": course["id"], "title": "Far future", "dueDate": "2999-01-01T00:00:00"},
    )
    api_client.post(
        "/api/assignments",
        json={"courseId": course["id"], "title": "Long gone", "dueDate": "2000-01-01T00:00:00"},
    )

    dashboard = api_client.get("/api/dashboard").json()

    assert dashboard["activeCourses"] == 1
    assert dashboard["pendingAssignments"] == 2
    assert [item["title"] for item in dashboard["upcoming"]] == ["Far future"]
    assert [item["title"] for item in dashboard["overdue"]] == ["Long gone"]


def test_user_profile(api_client):
    assert api_client.get("/api/user").json() is None

    payload = {"name": "Sam", "email": "sam@example.com", "currentSemester": "Fall 2024", "gpaTarget": 3.6}
    saved = api_client.put("/api/user", json=payload).json()
    assert saved["gpaTarget"] == 3.6
    assert api_client.get("/api/user").json() == saved

    assert api_client.put("/api/user", json={**payload, "gpaTarget": 5}).status_code == 400


def test_export_then_import(api_client, tmp_path):
    course = _create_course(api_client)
    api_client.post("/api/grades", json=_grade_payload(course["id"], grade=93))
    api_client.post(
        "/api/schedule",
        json={"courseId": course["id"], "dayOfWeek": 3, "startTime": "13:00", "endTime": "14:00"},
    )
    before_gpa = api_client.get("/api/gpa").json()
    before_calendar = api_client.get("/api/calendar", params={"year": 2024, "month": 10}).json()

    response = api_client.get("/api/export")
    assert response.status_code == 200
    assert "student-data-backup.json" in response.headers["content-disposition"]
    backup = response.json()

    data_store.set_base_path(tmp_path / "fresh")
    assert api_client.get("/api/courses").json() == []

    result = api_client.post("/api/import", json=backup).json()
    assert result["ok"] is True
    assert result["courses"] == 1
    assert api_client.get("/api/gpa").json() == before_gpa
    assert api_client.get("/api/calendar", params={"year": 2024, "month": 10}).json() == before_calendar


def test_import_rejects_invalid_backup(api_client):
    response = api_client.post("/api/import", json={"courses": "not-a-list"})
    assert response.status_code == 400

    response = api_client.post("/api/import", json={"courses": [{"name": "No code"}]})
    assert response.status_code == 400


def test_version_endpoint(api_client):
    response = api_client.get("/api/system/version")
    assert response.status_code == 200
    assert response.json()["version"]


def test_uvicorn_entry_points_share_the_app():
    import app as root_app
    from studyplanner.main import app as main_app

    assert main_app is planner_app.app
    assert root_app.app is planner_app.app


@pytest.mark.parametrize(
    ("path", "params"),
    [
        ("/api/calendar", {"year": 0, "month": 1}),
        ("/api/calendar", {"year": 10000, "month": 1}),
        ("/api/calendar/week", {"date": "0001-01-01"}),
        ("/api/calendar/week", {"date": "9999-12-31"}),
    ],
)
def test_calendar_rejects_dates_out_of_range(api_client, path, params):
    response = api_client.get(path, params=params)
    assert response.status_code == 400
    assert response.json()["detail"] == "Date out of range"


def test_import_with_duplicate_ids_is_rejected(api_client):
    course = {"id": "c1", "name": "A", "code": "A 1", "credits": 3}

    response = api_client.post("/api/import", json={"courses": [course, dict(course, name="B")]})

    assert response.status_code == 400
    assert "Duplicate id 'c1'" in response.json()["detail"]
    assert api_client.get("/api/courses").json() == []
