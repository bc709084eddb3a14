import uuid

import pytest


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


def test_current_semester(client, academic_year, make_student):
    student = make_student(semester="5th")

    response = client.get(f"/api/students/{student.id}/current-semester")

    assert response.status_code == 200
    body = response.json()
    assert body["current_semester"] == 5
    assert body["student_name"] == "Asha Rao"


def test_unknown_student_renders_error_body(client):
    response = client.get(f"/api/students/{uuid.uuid4()}/current-semester")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "NOT_FOUND"
    assert body["message"] == "Student not found"


def test_enrollment_flow(client, academic_year, make_student, subject):
    student = make_student(batch_year=2023)
    payload = {
        "student_id": str(student.id),
        "semester_number": 3,
        "academic_year_id": str(academic_year.id),
        "subject_ids": [str(subject.id)],
    }

    created = client.post("/api/enrollments", json=payload)
    duplicate = client.post("/api/enrollments", json=payload)
    listed = client.get(f"/api/students/{student.id}/enrollments", params={"semester_number": 3})

    assert created.status_code == 201
    assert created.json()["total_enrolled"] == 1
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "BUSINESS_RULE_VIOLATION"
    assert [e["status"] for e in listed.json()] == ["active"]

    enrollment_id = listed.json()[0]["id"]
    graded = client.put(f"/api/enrollments/{enrollment_id}/grade", json={"grade": "A", "marks_obtained": 90, "total_marks": 100})
    dropped = client.post(f"/api/enrollments/{enrollment_id}/drop")

    assert graded.json()["grade"] == "A"
    assert dropped.json()["status"] == "dropped"


def test_enroll_request_validation(client):
    response = client.post("/api/enrollments", json={
        "student_id": str(uuid.uuid4()),
        "semester_number": 3,
        "academic_year_id": str(uuid.uuid4()),
        "subject_ids": [],
    })

    assert response.status_code == 422


@pytest.fixture
def session(make_session, subject):
    return make_session(subject)


def test_progress_update_and_course_view(client, session, subject, make_block, make_enrollment):
    user_id = uuid.uuid4()
    enrollment = make_enrollment(user_id, subject)
    video = make_block(session, type="video", order_index=0)
    make_block(session, type="text", order_index=1)

    response = client.put(f"/api/progress/blocks/{video.id}", json={
        "user_id": str(user_id),
        "is_completed": True,
        "time_spent": 95,
        "enrollment_id": str(enrollment.id),
    })

    assert response.status_code == 200
    body = response.json()
    assert body["session_progress"]["completion_percentage"] == 50
    assert body["course_percentage"] == 50
    assert body["enrollment_updated"] is True

    course = client.get(f"/api/progress/subjects/{subject.id}", params={"user_id": str(user_id)})
    assert course.status_code == 200
    assert course.json()["overall_statistics"]["completion_percentage"] == 50

    session_view = client.get(f"/api/progress/sessions/{session.id}", params={"user_id": str(user_id)})
    assert session_view.json()["statistics"]["total_time_spent"] == 95


def test_course_progress_without_enrollment(client, subject):
    response = client.get(f"/api/progress/subjects/{subject.id}", params={"user_id": str(uuid.uuid4())})

    assert response.status_code == 403
    assert response.json()["error"] == "AUTHORIZATION_ERROR"


def test_quiz_submission_and_history(client, session, make_block, quiz_questions):
    quiz = make_block(session, type="quiz", content_data={"questions": quiz_questions})
    user_id = str(uuid.uuid4())

    first = client.post(f"/api/quizzes/{quiz.id}/attempts", json={
        "user_id": user_id, "answers": {"q1": "3"}, "time_spent_seconds": 30,
    })
    second = client.post(f"/api/quizzes/{quiz.id}/attempts", json={
        "user_id": user_id, "answers": {"q1": "4", "q2": True, "q3": "Paris"}, "time_spent_seconds": 45,
    })
    history = client.get(f"/api/quizzes/{quiz.id}/attempts", params={"user_id": user_id})

    assert first.status_code == 201
    assert first.json()["attempt"]["is_passed"] is False
    assert second.json()["attempt"]["attempt_number"] == 2
    assert history.json()["total_attempts"] == 2
    assert history.json()["best_percentage"] == 100


def test_second_examination_attempt_conflicts(client, session, make_block, quiz_questions):
    exam = make_block(session, type="examination", content_data={"questions": quiz_questions})
    payload = {"user_id": str(uuid.uuid4()), "answers": {"q1": "4"}, "time_spent_seconds": 30}

    assert client.post(f"/api/quizzes/{exam.id}/attempts", json=payload).status_code == 201
    response = client.post(f"/api/quizzes/{exam.id}/attempts", json=payload)

    assert response.status_code == 409
    status = client.get(f"/api/quizzes/{exam.id}/examination-status", params={"user_id": payload["user_id"]})
    assert status.json()["can_attempt"] is False


def test_assignment_submit_and_grade(client, session, make_block):
    block = make_block(session, type="assignment", content_data={"submissionFormat": "file", "maxPoints": 10})
    user_id = str(uuid.uuid4())

    rejected = client.post(f"/api/assignments/{block.id}/submissions", json={
        "user_id": user_id, "submission_text": "no file",
    })
    submitted = client.post(f"/api/assignments/{block.id}/submissions", json={
        "user_id": user_id,
        "submission_files": [{"file_name": "a.zip", "file_url": "https://files.example.edu/a.zip", "file_size": 10}],
    })

    assert rejected.status_code == 400
    assert submitted.status_code == 201
    submission_id = submitted.json()["id"]

    graded = client.put(f"/api/assignments/submissions/{submission_id}/grade", json={
        "graded_by": str(uuid.uuid4()), "score": 7, "feedback": "Good",
    })
    fetched = client.get(f"/api/assignments/{block.id}/submissions/{user_id}")

    assert graded.status_code == 200
    assert graded.json()["is_passed"] is True
    assert graded.json()["percentage"] == 70
    assert fetched.json()["status"] == "graded"


def test_missing_submission(client):
    response = client.get(f"/api/assignments/{uuid.uuid4()}/submissions/{uuid.uuid4()}")

    assert response.status_code == 404
