"""
Tests for /api/admin and /health.
"""

from unittest.mock import patch

from jobportal.db.postgres import Database


class TestAdminGate:
    def test_non_admin_is_403(self, client, seeker):
        assert client.get("/api/admin/dashboard", headers=seeker["headers"]).status_code == 403

    def test_anonymous_is_401(self, client):
        assert client.get("/api/admin/users").status_code == 401


class TestDashboard:
    def test_totals(self, client, database, admin, seeker, job):
        client.post("/api/applications/apply", headers=seeker["headers"], data={"job_id": job})
        client.put(f"/api/admin/users/{seeker['id']}/status", headers=admin["headers"],
                   json={"status": "suspended"})

        data = client.get("/api/admin/dashboard", headers=admin["headers"]).json()["data"]
        # admin + poster + seeker
        assert data == {
            "totalUsers": 3,
            "totalJobs": 1,
            "totalChapters": 0,
            "totalApplications": 1,
            "activeUsers": 2,
            "suspendedUsers": 1,
        }


class TestModeration:
    def test_list_users_filtered(self, client, admin, seeker, poster):
        data = client.get("/api/admin/users", headers=admin["headers"],
                          params={"role": "job_poster"}).json()["data"]
        assert [u["user_id"] for u in data] == [poster["id"]]
        assert "password" not in data[0]

    def test_suspend_locks_user_out(self, client, admin, seeker):
        response = client.put(f"/api/admin/users/{seeker['id']}/status", headers=admin["headers"],
                              json={"status": "suspended"})
        assert response.status_code == 200
        assert client.get("/api/auth/me", headers=seeker["headers"]).status_code == 403

    def test_missing_user_is_404(self, client, admin):
        response = client.put("/api/admin/users/999/status", headers=admin["headers"], json={"status": "active"})
        assert response.status_code == 404
        assert client.delete("/api/admin/users/999", headers=admin["headers"]).status_code == 404

    def test_delete_user_cascades(self, client, database, admin, poster, job):
        assert client.delete(f"/api/admin/users/{poster['id']}", headers=admin["headers"]).status_code == 200
        assert database.fetch_one("SELECT COUNT(*) AS n FROM jobs")["n"] == 0

    def test_job_status_and_delete(self, client, admin, job):
        response = client.put(f"/api/admin/jobs/{job}/status", headers=admin["headers"], json={"status": "rejected"})
        assert response.status_code == 200
        jobs = client.get("/api/admin/jobs", headers=admin["headers"], params={"status": "rejected"}).json()["data"]
        assert [j["job_id"] for j in jobs] == [job]

        assert client.delete(f"/api/admin/jobs/{job}", headers=admin["headers"]).status_code == 200
        assert client.delete(f"/api/admin/jobs/{job}", headers=admin["headers"]).status_code == 404

    def test_chapter_moderation(self, client, admin, make_user):
        founder = make_user("alumni")
        chapter = client.post("/api/chapters", headers=founder["headers"], data={
            "chapter_name": "EE Alumni", "college_name": "Tech Institute",
        }).json()["chapterId"]

        response = client.put(f"/api/admin/chapters/{chapter}/status", headers=admin["headers"],
                              json={"status": "blocked"})
        assert response.status_code == 200
        assert client.get("/api/chapters").json()["data"] == []
        assert len(client.get("/api/admin/chapters", headers=admin["headers"]).json()["data"]) == 1

        assert client.delete(f"/api/admin/chapters/{chapter}", headers=admin["headers"]).status_code == 200
        assert client.put("/api/admin/chapters/999/status", headers=admin["headers"],
                          json={"status": "active"}).status_code == 404

    def test_applications_listing(self, client, admin, seeker, job):
        client.post("/api/applications/apply", headers=seeker["headers"], data={"job_id": job})
        data = client.get("/api/admin/applications", headers=admin["headers"]).json()["data"]
        assert data[0]["applicant_name"] == "Job_Seeker 1"
        assert data[0]["company"] == "Acme"


class TestHealth:
    def test_connected(self, client):
        assert client.get("/health").json() == {"status": "healthy", "database": "connected"}

    def test_disconnected(self, client):
        with patch.object(Database, "ping", return_value=False):
            body = client.get("/health").json()
        assert body["database"] == "disconnected"
