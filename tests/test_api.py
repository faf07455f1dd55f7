"""
HTTP tests for the Flask API using the test client and an in-memory
database.
"""

import tempfile
import unittest
from io import BytesIO
from pathlib import Path

from hirewise.api import COMPANY_HEADER, USER_HEADER, create_app
from hirewise.db import create_session_factory
from hirewise.models import DOCX_MIMETYPE
from tests.helpers import ScriptedAIService, make_settings, sample_resume


class ApiTestCase(unittest.TestCase):
    """App with AI disabled, one company and one published job."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.client = self.make_client(ScriptedAIService(enabled=False))

        self.company = self.repo.create_company("Acme")
        response = self.client.post(
            "/api/jobs",
            json={
                "title": "Frontend Developer",
                "description": "Build UIs",
                "requirements": ["React", "Node.js"],
                "type": "full-time",
                "status": "published",
            },
            headers=self.company_headers(),
        )
        self.assertEqual(response.status_code, 201)
        self.job = response.get_json()["job"]

    def make_client(self, ai_service):
        self.app = create_app(
            make_settings(self.tmp.name),
            ai_service=ai_service,
            session_factory=create_session_factory("sqlite://"),
        )
        self.app.testing = True
        self.repo = self.app.extensions["hirewise"]["repository"]
        return self.app.test_client()

    def company_headers(self, company=None, user="recruiter"):
        return {COMPANY_HEADER: (company or self.company)["id"], USER_HEADER: user}

    @staticmethod
    def user_headers(user="alice"):
        return {USER_HEADER: user}

    def save_resume(self, user="alice", **overrides):
        response = self.client.post(
            "/api/resumes", json={"content": sample_resume(**overrides)}, headers=self.user_headers(user)
        )
        self.assertEqual(response.status_code, 200)
        return response.get_json()["resume"]


class TestDocumentRoutes(ApiTestCase):

    def test_export_resume_docx(self):
        response = self.client.post("/api/export-docx", json={"type": "resume", "content": sample_resume()})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, DOCX_MIMETYPE)
        self.assertEqual(response.headers["Content-Disposition"], 'attachment; filename="Jane_Doe_resume.docx"')
        self.assertEqual(int(response.headers["Content-Length"]), len(response.data))
        self.assertTrue(response.data.startswith(b"PK"))

    def test_export_cover_letter_docx(self):
        response = self.client.post("/api/export-docx", json={
            "type": "cover-letter",
            "content": {"introduction": "Hello."},
            "personalInfo": {"fullName": "Jane Doe"},
        })
        self.assertEqual(response.status_code, 200)
        self.assertIn('filename="Jane_Doe_cover-letter.docx"', response.headers["Content-Disposition"])

    def test_export_requires_type_and_content(self):
        response = self.client.post("/api/export-docx", json={"type": "resume"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "Missing required fields: content and type")

    def test_export_unknown_type(self):
        response = self.client.post("/api/export-docx", json={"type": "memo", "content": {"a": 1}})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "Invalid request data")

    def test_non_json_body(self):
        response = self.client.post("/api/export-docx", data="plain text", content_type="text/plain")
        self.assertEqual(response.status_code, 400)

    def test_generate_docx(self):
        response = self.client.post("/api/generate-docx", json=sample_resume())
        self.assertEqual(response.status_code, 200)
        self.assertIn('filename="Jane_Doe_resume.docx"', response.headers["Content-Disposition"])


class TestMatchingRoutes(ApiTestCase):

    def test_match_jobs_heuristic(self):
        response = self.client.post("/api/match-jobs", json={"resumeData": sample_resume()})
        jobs = response.get_json()["jobs"]

        self.assertEqual(len(jobs), 1)
        self.assertEqual(jobs[0]["id"], self.job["id"])
        self.assertEqual(jobs[0]["matchScore"], 55)
        self.assertEqual(jobs[0]["company"], "Acme")
        self.assertTrue(jobs[0]["canApply"])

    def test_match_jobs_without_published_jobs(self):
        self.client.patch(f"/api/jobs/{self.job['id']}", json={"status": "CLOSED"}, headers=self.company_headers())
        body = self.client.post("/api/match-jobs", json=sample_resume()).get_json()
        self.assertEqual(body, {"jobs": [], "message": "No jobs available for matching"})

    def test_match_candidates(self):
        self.save_resume()
        self.client.post("/api/apply-job", json={"jobId": self.job["id"]}, headers=self.user_headers())

        response = self.client.post(
            "/api/match-candidates", json={"jobId": self.job["id"]}, headers=self.company_headers()
        )
        body = response.get_json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"][0]["matching_score"], 55)

    def test_match_candidates_errors(self):
        headers = self.company_headers()
        self.assertEqual(self.client.post("/api/match-candidates", json={}, headers=headers).status_code, 400)
        missing = self.client.post("/api/match-candidates", json={"jobId": "missing"}, headers=headers)
        self.assertEqual(missing.status_code, 404)

    def test_match_candidates_needs_posting_company(self):
        self.save_resume()
        self.client.post("/api/apply-job", json={"jobId": self.job["id"]}, headers=self.user_headers())

        anonymous = self.client.post("/api/match-candidates", json={"jobId": self.job["id"]})
        self.assertEqual(anonymous.status_code, 401)

        other = self.repo.create_company("Globex")
        response = self.client.post(
            "/api/match-candidates", json={"jobId": self.job["id"]}, headers=self.company_headers(other)
        )
        self.assertEqual(response.status_code, 403)

        listed = self.client.get("/api/apply-job", headers=self.company_headers()).get_json()
        self.assertIsNone(listed["applications"][0]["matching_score"])


class TestAIRoutes(ApiTestCase):

    def test_disabled_ai_is_a_server_error(self):
        response = self.client.post("/api/enhance-paragraph", json={"text": "Hi", "paragraphType": "closing"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json()["error"], "AI features are disabled")

    def test_required_fields(self):
        self.assertEqual(self.client.post("/api/enhance-paragraph", json={"text": "Hi"}).status_code, 400)
        self.assertEqual(self.client.post("/api/generate-cover-letter", json={"jobInfo": {}}).status_code, 400)
        self.assertEqual(self.client.post("/api/generate-resume", json={}).status_code, 400)

    def test_invalid_section(self):
        response = self.client.post("/api/enhance-section", json={"section": "hobbies", "content": "chess"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "Invalid section specified")

    def test_cover_letter_fallback(self):
        client = self.make_client(ScriptedAIService(["Not JSON at all"]))
        response = client.post("/api/generate-cover-letter", json={
            "personalInfo": {"fullName": "Jane Doe"},
            "jobInfo": {"position": "Engineer", "company": "Acme"},
        })
        body = response.get_json()
        self.assertTrue(body["success"])
        self.assertTrue(body["coverLetter"]["closing"].endswith("Jane Doe"))

    def test_enhance_section(self):
        client = self.make_client(ScriptedAIService(["  Sharper summary.  "]))
        response = client.post("/api/enhance-section", json={"section": "summary", "content": "I code"})
        self.assertEqual(response.get_json(), {"enhancedContent": "Sharper summary.", "section": "summary"})

    def test_resume_analysis(self):
        client = self.make_client(ScriptedAIService(['{"overallScore": 88, "summary": "Solid"}']))
        response = client.post(
            "/api/resume-analysis",
            data={"file": (BytesIO(b"legacy bytes"), "cv.doc")},
            content_type="multipart/form-data",
        )
        body = response.get_json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["feedback"]["overallScore"], 88)

        download = client.get(body["fileUrl"])
        self.assertEqual(download.status_code, 200)
        self.assertEqual(download.data, b"legacy bytes")

    def test_resume_analysis_refuses_oversized_body(self):
        settings = make_settings(self.tmp.name)
        settings.storage.max_upload_bytes = 1024
        app = create_app(
            settings, ai_service=ScriptedAIService(), session_factory=create_session_factory("sqlite://")
        )
        self.assertEqual(app.config["MAX_CONTENT_LENGTH"], 1024 + 64 * 1024)

        response = app.test_client().post(
            "/api/resume-analysis",
            data={"file": (BytesIO(b"x" * (128 * 1024)), "cv.pdf")},
            content_type="multipart/form-data",
        )
        self.assertEqual(response.status_code, 413)
        self.assertEqual(list(Path(self.tmp.name).iterdir()), [])

    def test_resume_analysis_rejects_bad_upload(self):
        self.assertEqual(self.client.post("/api/resume-analysis", data={}).status_code, 400)
        response = self.client.post(
            "/api/resume-analysis",
            data={"file": (BytesIO(b"text"), "cv.txt")},
            content_type="multipart/form-data",
        )
        self.assertEqual(response.status_code, 400)


class TestCompanyRoutes(ApiTestCase):

    def test_register_company_then_post_job(self):
        response = self.client.post(
            "/api/companies", json={"name": "Globex", "industry": "Energy"}, headers=self.user_headers("hank")
        )
        self.assertEqual(response.status_code, 201)
        company = response.get_json()["company"]
        self.assertEqual(company["name"], "Globex")

        job = self.client.post(
            "/api/jobs", json={"title": "Plant Engineer"}, headers=self.company_headers(company, user="hank")
        )
        self.assertEqual(job.status_code, 201)
        self.assertEqual(job.get_json()["job"]["company"], "Globex")

    def test_register_company_validation(self):
        self.assertEqual(self.client.post("/api/companies", json={"name": "Globex"}).status_code, 401)
        response = self.client.post("/api/companies", json={}, headers=self.user_headers("hank"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "Company name is required")


class TestJobRoutes(ApiTestCase):

    def test_list_open_jobs(self):
        self.client.post("/api/jobs", json={"title": "Draft Role"}, headers=self.company_headers())

        open_jobs = self.client.get("/api/jobs?status=open").get_json()["jobs"]
        self.assertEqual([j["title"] for j in open_jobs], ["Frontend Developer"])
        self.assertEqual(open_jobs[0]["type"], "full-time")
        self.assertEqual(open_jobs[0]["requirements"], ["React", "Node.js"])

        self.assertEqual(len(self.client.get("/api/jobs?status=draft").get_json()["jobs"]), 1)
        self.assertEqual(len(self.client.get("/api/jobs").get_json()["jobs"]), 2)

    def test_unknown_status_filter(self):
        self.assertEqual(self.client.get("/api/jobs?status=archived").status_code, 400)

    def test_create_job_requires_company(self):
        response = self.client.post("/api/jobs", json={"title": "Nope"}, headers=self.user_headers())
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()["error"], "Company account required")

    def test_other_company_cannot_edit(self):
        other = self.repo.create_company("Globex")
        response = self.client.patch(
            f"/api/jobs/{self.job['id']}", json={"title": "Mine now"}, headers=self.company_headers(other)
        )
        self.assertEqual(response.status_code, 403)

    def test_closed_job_cannot_be_edited(self):
        headers = self.company_headers()
        closed = self.client.patch(f"/api/jobs/{self.job['id']}", json={"status": "CLOSED"}, headers=headers)
        self.assertEqual(closed.get_json()["job"]["status"], "CLOSED")

        response = self.client.patch(f"/api/jobs/{self.job['id']}", json={"status": "PUBLISHED"}, headers=headers)
        self.assertEqual(response.status_code, 400)


class TestApplicationRoutes(ApiTestCase):

    def test_apply_flow(self):
        resume = self.save_resume()
        response = self.client.post("/api/apply-job", json={"jobId": self.job["id"]}, headers=self.user_headers())
        body = response.get_json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["message"], "Application submitted successfully")
        self.assertEqual(body["application"]["resume_url"], f"/api/resumes/{resume['id']}")
        self.assertEqual(body["application"]["status"], "NEW")

        duplicate = self.client.post("/api/apply-job", json={"jobId": self.job["id"]}, headers=self.user_headers())
        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.get_json()["error"], "You have already applied to this job")

    def test_apply_requires_job_and_user(self):
        self.assertEqual(self.client.post("/api/apply-job", json={}, headers=self.user_headers()).status_code, 400)
        response = self.client.post("/api/apply-job", json={"jobId": self.job["id"]})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()["error"], "Unauthorized")

    def test_apply_without_resume(self):
        response = self.client.post("/api/apply-job", json={"jobId": self.job["id"]}, headers=self.user_headers("bob"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "Please create a resume before applying to jobs")

    def test_company_reviews_applications(self):
        self.save_resume()
        application = self.client.post(
            "/api/apply-job", json={"jobId": self.job["id"]}, headers=self.user_headers()
        ).get_json()["application"]

        listed = self.client.get("/api/apply-job", headers=self.company_headers()).get_json()
        self.assertEqual(listed["total"], 1)
        self.assertEqual(listed["applications"][0]["candidate_name"], "Jane Doe")

        response = self.client.patch(
            f"/api/applications/{application['id']}/status",
            json={"status": "shortlisted"},
            headers=self.company_headers(),
        )
        self.assertEqual(response.get_json()["application"]["status"], "SHORTLISTED")

        mine = self.client.get("/api/my-applications", headers=self.user_headers()).get_json()["applications"]
        self.assertEqual(mine[0]["status"], "shortlisted")
        self.assertEqual(mine[0]["company_name"], "Acme")

    def test_application_list_is_scoped_to_caller_company(self):
        self.save_resume()
        self.client.post("/api/apply-job", json={"jobId": self.job["id"]}, headers=self.user_headers())

        anonymous = self.client.get("/api/apply-job")
        self.assertEqual(anonymous.status_code, 401)
        self.assertEqual(self.client.get("/api/apply-job", headers=self.user_headers()).status_code, 401)

        other = self.repo.create_company("Globex")
        response = self.client.get(
            f"/api/apply-job?companyId={self.company['id']}", headers=self.company_headers(other)
        )
        self.assertEqual(response.get_json(), {"applications": [], "total": 0})

    def test_cannot_attach_another_users_saved_resume(self):
        resume = self.save_resume()
        self.client.post("/api/apply-job", json={"jobId": self.job["id"]}, headers=self.user_headers())

        other = self.repo.create_company("Globex")
        other_job = self.client.post(
            "/api/jobs",
            json={"title": "Backend Developer", "status": "published"},
            headers=self.company_headers(other, user="globex-hr"),
        ).get_json()["job"]

        response = self.client.post(
            "/api/apply-job",
            json={"jobId": other_job["id"], "resumeUrl": f"/api/resumes/{resume['id']}"},
            headers=self.user_headers("bob"),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "Selected resume not found or access denied")

        peek = self.client.get(f"/api/resumes/{resume['id']}", headers=self.company_headers(other, user="globex-hr"))
        self.assertEqual(peek.status_code, 404)

    def test_status_update_needs_status(self):
        response = self.client.patch("/api/applications/any/status", json={}, headers=self.company_headers())
        self.assertEqual(response.status_code, 400)


class TestResumeRoutes(ApiTestCase):

    def test_crud(self):
        resume = self.save_resume()
        listed = self.client.get("/api/resumes", headers=self.user_headers()).get_json()
        self.assertEqual(listed["total"], 1)

        fetched = self.client.get(f"/api/resumes/{resume['id']}", headers=self.user_headers()).get_json()
        self.assertEqual(fetched["resume"]["content"]["personalInfo"]["fullName"], "Jane Doe")

        updated = self.client.put(
            f"/api/resumes/{resume['id']}",
            json={"content": sample_resume(personalInfo={"fullName": "Jane Q. Doe"})},
            headers=self.user_headers(),
        )
        self.assertEqual(updated.get_json()["message"], "Resume updated successfully")

        download = self.client.get(f"/api/resumes/{resume['id']}?download=true", headers=self.user_headers())
        self.assertEqual(download.mimetype, DOCX_MIMETYPE)
        self.assertIn('filename="Jane_Q__Doe_resume.docx"', download.headers["Content-Disposition"])

        deleted = self.client.delete(f"/api/resumes/{resume['id']}", headers=self.user_headers())
        self.assertEqual(deleted.get_json()["message"], "Resume deleted successfully")
        self.assertEqual(self.client.get(f"/api/resumes/{resume['id']}", headers=self.user_headers()).status_code, 404)

    def test_validation(self):
        self.assertEqual(self.client.post("/api/resumes", json={}, headers=self.user_headers()).status_code, 400)
        self.assertEqual(self.client.get("/api/resumes").status_code, 401)
        response = self.client.post(
            "/api/resumes", json={"content": {"personalInfo": {}}}, headers=self.user_headers()
        )
        self.assertEqual(response.get_json()["error"], "Personal information is required")

    def test_content_must_be_an_object(self):
        for content in ("hello", {"personalInfo": "x"}):
            response = self.client.post("/api/resumes", json={"content": content}, headers=self.user_headers())
            self.assertEqual(response.status_code, 400)

    def test_other_users_cannot_see_resume(self):
        resume = self.save_resume()
        response = self.client.get(f"/api/resumes/{resume['id']}", headers=self.user_headers("mallory"))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            self.client.delete(f"/api/resumes/{resume['id']}", headers=self.user_headers("mallory")).status_code,
            404,
        )

    def test_hiring_company_can_see_applicant_resume(self):
        resume = self.save_resume()
        self.client.post(
            "/api/apply-job", json={"jobId": self.job["id"], "resumeId": resume["id"]}, headers=self.user_headers()
        )
        response = self.client.get(f"/api/resumes/{resume['id']}", headers=self.company_headers(user="hr-1"))
        self.assertEqual(response.status_code, 200)


class TestAppRoutes(ApiTestCase):

    def test_health(self):
        self.assertEqual(self.client.get("/health").get_json(), {"status": "ok", "ai": False})

    def test_unknown_route_is_json(self):
        response = self.client.get("/api/nope")
        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.get_json())


if __name__ == '__main__':
    unittest.main()
