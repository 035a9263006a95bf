"""
Tests for /api/career: resume analysis, mock interviews, history, stats.
"""

import io

from sqlalchemy import text


RESUME = "Led a team that increased revenue by 20% and developed and launched a product."


def practice_rows(database, user_id):
    return database.fetch_one(
        "SELECT COUNT(*) AS n FROM interview_practice WHERE user_id = :id", {"id": user_id}
    )["n"]


# ============================================================
# Resume analysis
# ============================================================


class TestAnalyzeResume:
    def test_requires_auth(self, client):
        assert client.post("/api/career/analyze-resume", json={"resumeText": RESUME}).status_code == 401

    def test_scores_text(self, client, seeker):
        response = client.post("/api/career/analyze-resume", headers=seeker["headers"],
                               json={"resumeText": RESUME})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["score"] == 77
        assert data["hasMetrics"] is True

    def test_short_text_rejected_with_field_error(self, client, seeker):
        response = client.post("/api/career/analyze-resume", headers=seeker["headers"],
                               json={"resumeText": "short"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0]["field"] == "resumeText"

    def test_missing_text_rejected(self, client, seeker):
        response = client.post("/api/career/analyze-resume", headers=seeker["headers"], json={})
        assert response.status_code == 400

    def test_txt_upload(self, client, seeker):
        files = {"file": ("resume.txt", io.BytesIO(RESUME.encode()), "text/plain")}
        response = client.post("/api/career/analyze-resume/upload", headers=seeker["headers"], files=files)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["score"] == 77
        assert data["filename"] == "resume.txt"

    def test_unsupported_upload_rejected(self, client, seeker):
        files = {"file": ("resume.exe", io.BytesIO(b"MZ..."), "application/octet-stream")}
        response = client.post("/api/career/analyze-resume/upload", headers=seeker["headers"], files=files)
        assert response.status_code == 400


# ============================================================
# Mock interview
# ============================================================


class TestMockInterview:
    def test_scores_and_persists(self, client, database, seeker):
        response = client.post("/api/career/mock-interview", headers=seeker["headers"], json={
            "prompt": "Tell me about a conflict",
            "response": "The situation was tense and the result was good",
            "duration": 90,
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["starComponents"]["situation"] is True
        assert data["starComponents"]["result"] is True
        assert data["score"] == 60

        row = database.fetch_one("SELECT score, duration FROM interview_practice WHERE user_id = :id",
                                 {"id": seeker["id"]})
        assert row == {"score": 60, "duration": 90}

    def test_empty_response_rejected_and_not_persisted(self, client, database, seeker):
        response = client.post("/api/career/mock-interview", headers=seeker["headers"],
                               json={"prompt": "Why us?", "response": "   "})
        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "response", "message": "Response is required"}]
        assert practice_rows(database, seeker["id"]) == 0

    def test_history_latest_ten(self, client, seeker):
        for i in range(12):
            client.post("/api/career/mock-interview", headers=seeker["headers"],
                        json={"prompt": f"Question {i}", "response": "I did it"})
        history = client.get("/api/career/interview-history", headers=seeker["headers"]).json()["data"]
        assert len(history) == 10
        assert history[0]["prompt"] == "Question 11"
        assert "response" not in history[0]

    def test_history_is_per_user(self, client, make_user, seeker):
        other = make_user("student")
        client.post("/api/career/mock-interview", headers=other["headers"],
                    json={"prompt": "Q", "response": "A"})
        assert client.get("/api/career/interview-history", headers=seeker["headers"]).json()["data"] == []


# ============================================================
# Stats
# ============================================================


class TestStats:
    def test_no_activity(self, client, seeker):
        data = client.get("/api/career/stats", headers=seeker["headers"]).json()["data"]
        assert data == {
            "confidencePulse": 0,
            "interviewPracticeCount": 0,
            "averageInterviewScore": 0,
            "totalApplications": 0,
            "acceptedApplications": 0,
            "shortlistedApplications": 0,
        }

    def test_counts_and_pulse(self, client, database, seeker, job):
        with database.session() as s:
            for score in (40, 60):
                s.execute(
                    text("""
                        INSERT INTO interview_practice (user_id, prompt, response, score)
                        VALUES (:uid, 'q', 'a', :score)
                    """),
                    {"uid": seeker["id"], "score": score}
                )
        client.post("/api/applications/apply", headers=seeker["headers"], data={"job_id": job})
        with database.session() as s:
            s.execute(text("UPDATE applications SET status = 'shortlisted'"))

        data = client.get("/api/career/stats", headers=seeker["headers"]).json()["data"]
        assert data["interviewPracticeCount"] == 2
        assert data["averageInterviewScore"] == 50
        assert data["totalApplications"] == 1
        assert data["shortlistedApplications"] == 1
        assert data["acceptedApplications"] == 0
        # 2*8 + 50*0.3 + 1*3
        assert data["confidencePulse"] == 16 + 15 + 3


def test_store_failure_is_generic_500(client, database, seeker):
    with database.session() as s:
        s.execute(text("DROP TABLE interview_practice"))
    response = client.post("/api/career/mock-interview", headers=seeker["headers"],
                           json={"prompt": "Q", "response": "A"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Something went wrong. Please try again later."}
