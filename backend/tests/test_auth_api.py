"""
TutorMatch Backend — Auth API Tests
=====================================

What:  Signup/login endpoints end to end through the ASGI app.

What we test:
    ✅ Student and tutor signup → 201 with a working token
    ✅ Login by email or username
    ✅ Duplicate username/email → 409
    ✅ Wrong password / unknown account → 401 "Invalid credentials"
    ✅ Tutor without availability → 400 with the offending field
    ✅ Role gates: a tutor token on a student route → 403
    ✅ Missing / invalid bearer token → 401
"""

import pytest

from conftest import TEST_PASSWORD


def student_body(**overrides):
    body = {
        "name": "Asha",
        "username": "asha",
        "email": "Asha@Example.com",
        "password": "secret123",
    }
    body.update(overrides)
    return body


def tutor_body(**overrides):
    body = {
        "name": "Ravi",
        "username": "ravi",
        "email": "ravi@example.com",
        "password": "secret123",
        "profession": "Physicist",
        "price": 800,
        "subjects": ["Physics"],
        "locations": ["Online"],
        "availability": [
            {"day": "Wednesday", "slots": [{"startTime": "17:00", "endTime": "18:00"}]},
        ],
    }
    body.update(overrides)
    return body


class TestStudentAuth:

    @pytest.mark.asyncio
    async def test_signup_then_login(self, client):
        response = await client.post("/api/auth/student/signup", json=student_body())
        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "student"
        assert data["email"] == "asha@example.com"
        assert data["token"]

        me = await client.get(
            "/api/students/me", headers={"Authorization": f"Bearer {data['token']}"}
        )
        assert me.status_code == 200
        assert me.json()["username"] == "asha"

        by_email = await client.post(
            "/api/auth/student/login", json={"email": "asha@example.com", "password": "secret123"}
        )
        by_username = await client.post(
            "/api/auth/student/login", json={"username": "asha", "password": "secret123"}
        )
        assert by_email.status_code == 200
        assert by_username.status_code == 200
        assert by_email.json()["id"] == data["id"]

    @pytest.mark.asyncio
    async def test_duplicate_rejected(self, client):
        await client.post("/api/auth/student/signup", json=student_body())
        response = await client.post(
            "/api/auth/student/signup", json=student_body(email="other@example.com")
        )
        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "conflict"
        assert body["message"] == "Username or email already exists"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, make_student):
        student = await make_student()
        response = await client.post(
            "/api/auth/student/login", json={"email": student.email, "password": "wrong-pass"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_unknown_account_same_message(self, client):
        response = await client.post(
            "/api/auth/student/login", json={"email": "ghost@example.com", "password": "whatever"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_needs_identifier(self, client):
        response = await client.post("/api/auth/student/login", json={"password": "secret123"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_student_account_cannot_log_in_as_tutor(self, client, make_student):
        student = await make_student()
        response = await client.post(
            "/api/auth/tutor/login", json={"email": student.email, "password": TEST_PASSWORD}
        )
        assert response.status_code == 401


class TestTutorAuth:

    @pytest.mark.asyncio
    async def test_signup(self, client):
        response = await client.post("/api/auth/tutor/signup", json=tutor_body())
        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "tutor"
        assert data["is_verified"] is False

        public = await client.get(f"/api/tutors/{data['id']}")
        assert public.status_code == 200
        profile = public.json()
        assert profile["rating"] == {"average": 0.0, "total": 0}
        assert profile["availability"] == tutor_body()["availability"]

    @pytest.mark.asyncio
    async def test_empty_availability_rejected(self, client):
        response = await client.post("/api/auth/tutor/signup", json=tutor_body(availability=[]))
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "availability"

    @pytest.mark.asyncio
    async def test_overlapping_slots_rejected(self, client):
        availability = [{
            "day": "Monday",
            "slots": [
                {"startTime": "09:00", "endTime": "10:00"},
                {"startTime": "09:30", "endTime": "10:30"},
            ],
        }]
        response = await client.post(
            "/api/auth/tutor/signup", json=tutor_body(availability=availability)
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_time_is_schema_error(self, client):
        availability = [{"day": "Monday", "slots": [{"startTime": "9am", "endTime": "10:00"}]}]
        response = await client.post(
            "/api/auth/tutor/signup", json=tutor_body(availability=availability)
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_login(self, client, make_tutor):
        tutor = await make_tutor()
        response = await client.post(
            "/api/auth/tutor/login", json={"username": tutor.username, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["role"] == "tutor"


class TestAdminAuth:

    @pytest.mark.asyncio
    async def test_login(self, client, make_admin):
        admin = await make_admin()
        response = await client.post(
            "/api/auth/admin/login", json={"email": admin.email, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    @pytest.mark.asyncio
    async def test_bad_password(self, client, make_admin):
        admin = await make_admin()
        response = await client.post(
            "/api/auth/admin/login", json={"email": admin.email, "password": "nope"}
        )
        assert response.status_code == 401


class TestTokenGuards:

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.get("/api/students/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized"

    @pytest.mark.asyncio
    async def test_garbage_token(self, client):
        response = await client.get(
            "/api/students/me", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_wrong_role(self, client, make_tutor, auth_headers):
        tutor = await make_tutor()
        response = await client.get("/api/students/me", headers=auth_headers(tutor, "tutor"))
        assert response.status_code == 403
        assert response.json()["message"] == "Student access required"

    @pytest.mark.asyncio
    async def test_logout(self, client):
        response = await client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}
