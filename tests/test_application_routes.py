"""
Tests for /api/applications.

The per-job applications_count must track real rows: a duplicate apply never
bumps it, and withdrawing never drives it below zero.
"""

import io

from sqlalchemy import text


def applications_count(database, job_id):
    return database.fetch_one(
        "SELECT applications_count FROM jobs WHERE job_id = :id", {"id": job_id}
    )["applications_count"]


def apply(client, user, job_id, **extra):
    return client.post("/api/applications/apply", headers=user["headers"], data={"job_id": job_id, **extra})


# ============================================================
# Apply
# ============================================================


class TestApply:
    def test_apply_increments_count_and_emails_poster(self, client, database, mailer, poster, seeker, job):
        response = apply(client, seeker, job, cover_letter="Hire me")
        assert response.status_code == 201
        assert applications_count(database, job) == 1
        assert mailer.outbox[-1] == (poster["email"], "New Application Received - JobPortal")

        mine = client.get("/api/applications", headers=seeker["headers"]).json()["data"]
        assert len(mine) == 1
        assert mine[0]["job_title"] == "Backend Engineer"
        assert mine[0]["status"] == "pending"
        assert mine[0]["cover_letter"] == "Hire me"

    def test_duplicate_apply_is_conflict_and_count_unchanged(self, client, database, seeker, job):
        assert apply(client, seeker, job).status_code == 201
        response = apply(client, seeker, job)
        assert response.status_code == 400
        assert response.json()["message"] == "Already applied to this job"
        assert applications_count(database, job) == 1
        rows = database.fetch_one("SELECT COUNT(*) AS n FROM applications WHERE job_id = :id", {"id": job})
        assert rows["n"] == 1

    def test_missing_job_is_404(self, client, seeker):
        assert apply(client, seeker, 999).status_code == 404

    def test_inactive_job_rejected(self, client, poster, seeker, job):
        client.put(f"/api/jobs/{job}", headers=poster["headers"], json={"status": "closed"})
        response = apply(client, seeker, job)
        assert response.status_code == 400
        assert response.json()["message"] == "Job is not accepting applications"

    def test_profile_resume_attached(self, client, database, seeker, job):
        with database.session() as s:
            s.execute(
                text("UPDATE profiles SET resume = '/uploads/cv.pdf' WHERE user_id = :id"),
                {"id": seeker["id"]}
            )
        apply(client, seeker, job)
        row = database.fetch_one("SELECT resume FROM applications WHERE job_id = :id", {"id": job})
        assert row["resume"] == "/uploads/cv.pdf"

    def test_attached_resume_stored_and_preferred(self, client, database, upload_dir, seeker, job):
        with database.session() as s:
            s.execute(
                text("UPDATE profiles SET resume = '/uploads/cv.pdf' WHERE user_id = :id"),
                {"id": seeker["id"]}
            )
        files = {"resume": ("tailored.txt", io.BytesIO(b"Tailored for Acme"), "text/plain")}
        response = client.post("/api/applications/apply", headers=seeker["headers"],
                               data={"job_id": job}, files=files)
        assert response.status_code == 201, response.text

        path = database.fetch_one("SELECT resume FROM applications WHERE job_id = :id", {"id": job})["resume"]
        assert path.startswith(f"/uploads/resume-{seeker['id']}-")
        assert path.endswith(".txt")
        assert (upload_dir / path.rsplit("/", 1)[1]).read_bytes() == b"Tailored for Acme"

    def test_attached_resume_with_bad_type_rejected(self, client, database, upload_dir, seeker, job):
        files = {"resume": ("cv.exe", io.BytesIO(b"MZ..."), "application/octet-stream")}
        response = client.post("/api/applications/apply", headers=seeker["headers"],
                               data={"job_id": job}, files=files)
        assert response.status_code == 400
        assert applications_count(database, job) == 0
        assert list(upload_dir.iterdir()) == []

    def test_duplicate_with_file_stores_nothing(self, client, upload_dir, seeker, job):
        assert apply(client, seeker, job).status_code == 201
        files = {"resume": ("cv.txt", io.BytesIO(b"Second try"), "text/plain")}
        response = client.post("/api/applications/apply", headers=seeker["headers"],
                               data={"job_id": job}, files=files)
        assert response.status_code == 400
        assert list(upload_dir.iterdir()) == []

    def test_job_id_required(self, client, seeker):
        response = client.post("/api/applications/apply", headers=seeker["headers"], data={})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "job_id"

    def test_mail_failure_does_not_fail_apply(self, client, mailer, monkeypatch, seeker, job):
        monkeypatch.setattr(mailer, "send", lambda to, subject, html: False)
        assert apply(client, seeker, job).status_code == 201


# ============================================================
# Withdraw
# ============================================================


class TestWithdraw:
    def _application_id(self, database, job_id, user_id):
        return database.fetch_one(
            "SELECT application_id FROM applications WHERE job_id = :j AND user_id = :u",
            {"j": job_id, "u": user_id}
        )["application_id"]

    def test_withdraw_decrements(self, client, database, seeker, job):
        apply(client, seeker, job)
        app_id = self._application_id(database, job, seeker["id"])

        response = client.delete(f"/api/applications/{app_id}", headers=seeker["headers"])
        assert response.status_code == 200
        assert applications_count(database, job) == 0

    def test_count_floors_at_zero(self, client, database, seeker, job):
        apply(client, seeker, job)
        app_id = self._application_id(database, job, seeker["id"])
        with database.session() as s:
            s.execute(text("UPDATE jobs SET applications_count = 0 WHERE job_id = :id"), {"id": job})

        assert client.delete(f"/api/applications/{app_id}", headers=seeker["headers"]).status_code == 200
        assert applications_count(database, job) == 0

    def test_other_user_cannot_withdraw(self, client, database, make_user, seeker, job):
        apply(client, seeker, job)
        app_id = self._application_id(database, job, seeker["id"])
        intruder = make_user("job_seeker")
        assert client.delete(f"/api/applications/{app_id}", headers=intruder["headers"]).status_code == 403
        assert applications_count(database, job) == 1

    def test_admin_can_withdraw(self, client, database, admin, seeker, job):
        apply(client, seeker, job)
        app_id = self._application_id(database, job, seeker["id"])
        assert client.delete(f"/api/applications/{app_id}", headers=admin["headers"]).status_code == 200

    def test_missing_is_404(self, client, seeker):
        assert client.delete("/api/applications/999", headers=seeker["headers"]).status_code == 404

    def test_reapply_after_withdraw(self, client, database, seeker, job):
        apply(client, seeker, job)
        app_id = self._application_id(database, job, seeker["id"])
        client.delete(f"/api/applications/{app_id}", headers=seeker["headers"])
        assert apply(client, seeker, job).status_code == 201
        assert applications_count(database, job) == 1


# ============================================================
# Review
# ============================================================


class TestReview:
    def test_poster_sees_applicants(self, client, poster, seeker, job):
        apply(client, seeker, job)
        response = client.get(f"/api/applications/job/{job}", headers=poster["headers"])
        assert response.status_code == 200
        assert [a["email"] for a in response.json()["data"]] == [seeker["email"]]

    def test_other_poster_cannot_see_applicants(self, client, make_user, job):
        other = make_user("job_poster")
        assert client.get(f"/api/applications/job/{job}", headers=other["headers"]).status_code == 403

    def test_seeker_role_cannot_review(self, client, seeker, job):
        assert client.get(f"/api/applications/job/{job}", headers=seeker["headers"]).status_code == 403

    def test_status_update_emails_applicant(self, client, database, mailer, poster, seeker, job):
        apply(client, seeker, job)
        app_id = database.fetch_one("SELECT application_id FROM applications")["application_id"]

        response = client.put(f"/api/applications/{app_id}/status", headers=poster["headers"],
                              json={"status": "shortlisted"})
        assert response.status_code == 200
        assert mailer.outbox[-1] == (seeker["email"], "Application Update - Backend Engineer")
        assert database.fetch_one("SELECT status FROM applications")["status"] == "shortlisted"

    def test_emails_scheduled_after_response(self, client, database, poster, seeker, job, scheduled_tasks):
        apply(client, seeker, job)
        app_id = database.fetch_one("SELECT application_id FROM applications")["application_id"]
        client.put(f"/api/applications/{app_id}/status", headers=poster["headers"], json={"status": "accepted"})
        assert scheduled_tasks[-2:] == ["send_new_application", "send_status_update"]

    def test_any_status_may_follow_any_other(self, client, database, mailer, poster, seeker, job):
        apply(client, seeker, job)
        app_id = database.fetch_one("SELECT application_id FROM applications")["application_id"]

        for status in ["accepted", "rejected", "pending"]:
            response = client.put(f"/api/applications/{app_id}/status", headers=poster["headers"],
                                  json={"status": status})
            assert response.status_code == 200
        assert database.fetch_one("SELECT status FROM applications")["status"] == "pending"

    def test_pending_status_sends_no_email(self, client, database, mailer, poster, seeker, job):
        apply(client, seeker, job)
        sent = len(mailer.outbox)
        app_id = database.fetch_one("SELECT application_id FROM applications")["application_id"]
        client.put(f"/api/applications/{app_id}/status", headers=poster["headers"], json={"status": "pending"})
        assert len(mailer.outbox) == sent

    def test_invalid_status_rejected(self, client, database, poster, seeker, job):
        apply(client, seeker, job)
        app_id = database.fetch_one("SELECT application_id FROM applications")["application_id"]
        response = client.put(f"/api/applications/{app_id}/status", headers=poster["headers"],
                              json={"status": "hired"})
        assert response.status_code == 400
