"""
Unit tests for the heuristic match score and the matching service.
"""

import json
import unittest

from hirewise.models import CandidateProfile, Education, Experience, JobPosting, Skill
from hirewise.services.matching_service import (
    MatchingService,
    calculate_basic_match_score,
    clamp_score,
    get_match_reasons,
    matching_skills,
    round_half_up,
    score_breakdown,
)
from tests.helpers import ScriptedAIService, make_job, make_profile


class TestBasicMatchScore(unittest.TestCase):
    """Deterministic keyword heuristic."""

    def test_react_frontend_developer_scores_55(self):
        profile = CandidateProfile(
            skills=[Skill(name="React")],
            experiences=[Experience(position="Frontend Developer")],
        )
        job = JobPosting(title="Frontend Developer", required_skills=["React", "Node.js"])

        breakdown = score_breakdown(profile, job)
        self.assertEqual(breakdown["skills"], 25.0)
        self.assertEqual(breakdown["experience"], 30.0)
        self.assertEqual(breakdown["education"], 0.0)
        self.assertEqual(calculate_basic_match_score(profile, job), 55)

    def test_no_required_skills_contributes_zero(self):
        profile = make_profile()
        job = make_job(required_skills=[])

        self.assertEqual(score_breakdown(profile, job)["skills"], 0.0)
        # Experience still counts
        self.assertEqual(calculate_basic_match_score(profile, job), 30)

    def test_empty_profile_and_job(self):
        self.assertEqual(calculate_basic_match_score(CandidateProfile(), JobPosting()), 0)

    def test_missing_optional_strings_do_not_raise(self):
        profile = CandidateProfile(
            experiences=[Experience(position=None, company=None)],
            education=[Education(field=None, degree=None)],
            skills=[Skill(name="Python")],
        )
        job = JobPosting(title="", required_skills=["python"])
        self.assertEqual(calculate_basic_match_score(profile, job), 50)
        self.assertEqual(get_match_reasons(profile, job), ["Skills match: python"])

    def test_score_is_always_int_in_range(self):
        profiles = [
            CandidateProfile(),
            make_profile(),
            CandidateProfile(
                skills=[Skill(name=n) for n in ("python", "java", "sql", "go")],
                experiences=[Experience(position="Software Engineer")] * 3,
                education=[Education(field="Computer Science")] * 3,
            ),
        ]
        jobs = [
            JobPosting(),
            make_job(),
            JobPosting(title="Senior Software Engineer", required_skills=["Python", "SQL"]),
            JobPosting(title="Designer", required_skills=["a", "b", "c", "d", "e", "f", "g"]),
        ]
        for profile in profiles:
            for job in jobs:
                score = calculate_basic_match_score(profile, job)
                self.assertIsInstance(score, int)
                self.assertGreaterEqual(score, 0)
                self.assertLessEqual(score, 100)

    def test_all_categories_cap_at_100(self):
        profile = CandidateProfile(
            skills=[Skill(name="Python"), Skill(name="SQL")],
            experiences=[Experience(position="Software Engineer"), Experience(position="Data Engineer")],
            education=[Education(field="Computer Science"), Education(field="Software Engineering")],
        )
        job = JobPosting(title="Software Engineer", required_skills=["Python", "SQL"])

        breakdown = score_breakdown(profile, job)
        self.assertEqual(breakdown, {"skills": 50.0, "experience": 30.0, "education": 20.0})
        self.assertEqual(calculate_basic_match_score(profile, job), 100)

    def test_substring_overlap_either_direction(self):
        profile = CandidateProfile(skills=[Skill(name="React Native"), Skill(name="SQL")])
        job = JobPosting(required_skills=["react", "PostgreSQL"])
        self.assertEqual(matching_skills(profile, job), ["react native", "sql"])

    def test_half_points_round_up(self):
        profile = CandidateProfile(skills=[Skill(name="python")])
        job = JobPosting(title="Backend Role", required_skills=["python", "java", "go", "rust"])
        # 50 * 1/4 = 12.5
        self.assertEqual(calculate_basic_match_score(profile, job), 13)

    def test_education_first_field_rule_decides(self):
        job = JobPosting(title="Data Analyst")
        # "engineering" hits the first rule, which needs developer/engineer in the title
        engineering = CandidateProfile(education=[Education(field="Software Engineering")])
        statistics = CandidateProfile(education=[Education(field="Statistics")])

        self.assertEqual(score_breakdown(engineering, job)["education"], 0.0)
        self.assertEqual(score_breakdown(statistics, job)["education"], 20.0)

    def test_other_education_rules(self):
        cases = [
            ("Graphic Design", "Product Designer", 20.0),
            ("Business Administration", "Project Manager", 20.0),
            ("Business Administration", "Frontend Developer", 0.0),
            ("Data Science", "Data Engineer", 20.0),
            ("History", "Historian", 0.0),
        ]
        for field, title, expected in cases:
            profile = CandidateProfile(education=[Education(field=field)])
            self.assertEqual(
                score_breakdown(profile, JobPosting(title=title))["education"], expected, (field, title)
            )


class TestMatchReasons(unittest.TestCase):

    def test_reasons_name_three_skills_and_first_experience(self):
        profile = CandidateProfile(
            skills=[Skill(name=n) for n in ("Python", "Django", "SQL", "Docker")],
            experiences=[
                Experience(position="Barista"),
                Experience(position="Backend Developer"),
                Experience(position="Lead Developer"),
            ],
        )
        job = JobPosting(title="Python Developer", required_skills=["python", "django", "sql", "docker"])

        self.assertEqual(get_match_reasons(profile, job), [
            "Skills match: python, django, sql",
            "Relevant experience as Backend Developer",
        ])

    def test_no_reasons_without_overlap(self):
        profile = CandidateProfile(skills=[Skill(name="Cooking")])
        self.assertEqual(get_match_reasons(profile, make_job()), [])

    def test_reasons_are_stable(self):
        profile, job = make_profile(), make_job()
        self.assertEqual(get_match_reasons(profile, job), get_match_reasons(profile, job))


class TestScoreHelpers(unittest.TestCase):

    def test_round_half_up(self):
        self.assertEqual(round_half_up(12.5), 13)
        self.assertEqual(round_half_up(12.49), 12)
        self.assertEqual(round_half_up(0), 0)

    def test_clamp_score(self):
        self.assertEqual(clamp_score(87.5), 88)
        self.assertEqual(clamp_score("64"), 64)
        self.assertEqual(clamp_score(140), 100)
        self.assertEqual(clamp_score(-3), 0)
        self.assertEqual(clamp_score(None), 0)
        self.assertEqual(clamp_score("high"), 0)


class TestMatchingService(unittest.TestCase):
    """Job ranking with and without the AI path."""

    def setUp(self):
        self.profile = make_profile()
        self.frontend = make_job(id="a")                                          # 55
        self.backend = make_job("Backend Engineer", ["React"], id="b")             # 50
        self.accountant = make_job("Accountant", ["Excel"], id="c")                # 0
        self.borderline = make_job("Accountant", ["React", "CSS", "Go", "Rust", "Java"], id="d")  # 20
        self.jobs = [self.accountant, self.backend, self.borderline, self.frontend]

    def test_basic_matching_filters_and_sorts(self):
        service = MatchingService(ScriptedAIService(enabled=False))
        matches = service.match_jobs(self.profile, self.jobs)

        self.assertEqual([m.job.id for m in matches], ["a", "b"])
        self.assertEqual([m.match_score for m in matches], [55, 50])
        self.assertTrue(all(m.can_apply for m in matches))
        self.assertIn("Relevant experience as Frontend Developer", matches[0].match_reasons)

    def test_basic_matching_caps_results(self):
        jobs = [make_job(id=f"job-{i}") for i in range(12)]
        service = MatchingService(ScriptedAIService(enabled=False))
        self.assertEqual(len(service.match_jobs(self.profile, jobs)), 10)

    def test_ai_ranking_joined_on_job_id(self):
        ranked = [
            {"jobId": "b", "matchScore": 70, "matchReasons": ["Backend fit"]},
            {"jobId": "a", "matchScore": 90, "improvementSuggestions": ["Learn Node.js"]},
            {"jobId": "unknown", "matchScore": 99},
        ]
        ai = ScriptedAIService([f"```json\n{json.dumps(ranked)}\n```"])
        matches = MatchingService(ai).match_jobs(self.profile, self.jobs)

        self.assertEqual([(m.job.id, m.match_score) for m in matches], [("a", 90), ("b", 70)])
        self.assertEqual(matches[0].improvement_suggestions, ["Learn Node.js"])
        self.assertEqual(matches[1].match_reasons, ["Backend fit"])
        self.assertIn("[id: a]", ai.prompts[0][0])

    def test_unparseable_ai_answer_falls_back(self):
        ai = ScriptedAIService(["Sure! Here are some great jobs for you."])
        matches = MatchingService(ai).match_jobs(self.profile, self.jobs)
        self.assertEqual([m.job.id for m in matches], ["a", "b"])

    def test_ai_failure_falls_back(self):
        matches = MatchingService(ScriptedAIService([])).match_jobs(self.profile, self.jobs)
        self.assertEqual([m.match_score for m in matches], [55, 50])

    def test_no_jobs(self):
        self.assertEqual(MatchingService(ScriptedAIService(["[]"])).match_jobs(self.profile, []), [])

    def test_match_response_shape(self):
        service = MatchingService(ScriptedAIService(enabled=False))
        response = service.match_jobs(self.profile, [self.frontend])[0].to_response()

        self.assertEqual(response["id"], "a")
        self.assertEqual(response["matchScore"], 55)
        self.assertEqual(response["type"], "full-time")
        self.assertEqual(response["salary_range"], "Competitive")
        self.assertTrue(response["canApply"])

    def test_score_application_uses_final_score(self):
        ai = ScriptedAIService(['{"skillsMatch": {"score": 90}, "finalScore": 87.5}'])
        score = MatchingService(ai).score_application(self.frontend, "resume text", "cover letter")
        self.assertEqual(score, 88)
        self.assertIn("Cover Letter:\ncover letter", ai.prompts[0][0])

    def test_score_application_fallbacks(self):
        service = MatchingService(ScriptedAIService(["no json here", "still none"]))
        self.assertEqual(service.score_application(self.frontend, "resume text"), 0)
        self.assertEqual(
            service.score_application(self.frontend, "resume text", profile=self.profile), 55
        )

    def test_match_candidates_needs_repository(self):
        with self.assertRaises(RuntimeError):
            MatchingService(ScriptedAIService(enabled=False)).match_candidates("a")


if __name__ == '__main__':
    unittest.main()
