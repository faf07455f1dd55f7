"""
Flask HTTP API.

Caller identity comes from the ``X-User-Id`` and ``X-Company-Id`` headers,
which an upstream auth layer is expected to set.
"""

from typing import Any, Dict, Optional

from flask import Blueprint, Flask, Response, current_app, jsonify, request, send_from_directory
from pydantic import ValidationError
from sqlalchemy.orm import sessionmaker
from werkzeug.exceptions import HTTPException

from hirewise.config import Settings, get_settings
from hirewise.db import create_session_factory
from hirewise.exceptions import HireWiseError, InvalidRequestError, UnauthorizedError
from hirewise.models import (
    CandidateProfile,
    ExportRequest,
    GeneratedDocument,
    JobInfo,
    JobPosting,
    JobStatus,
    PersonalInfo,
)
from hirewise.services import (
    AIService,
    JobBoardRepository,
    MatchingService,
    ResumeService,
    document_service,
)
from hirewise.services.job_board_service import COMPANY_PROFILE_FIELDS
from hirewise.utils.logger import get_logger

logger = get_logger(__name__)

USER_HEADER = "X-User-Id"
COMPANY_HEADER = "X-Company-Id"
EMAIL_HEADER = "X-User-Email"

MULTIPART_OVERHEAD_BYTES = 64 * 1024

api = Blueprint("api", __name__, url_prefix="/api")


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

def _services() -> Dict[str, Any]:
    return current_app.extensions["hirewise"]


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    return data


def _require_user() -> str:
    user_id = request.headers.get(USER_HEADER)
    if not user_id:
        raise UnauthorizedError("Unauthorized")
    return user_id


def _require_company() -> str:
    company_id = request.headers.get(COMPANY_HEADER)
    if not company_id:
        raise UnauthorizedError("Company account required")
    return company_id


def _docx_response(document: GeneratedDocument) -> Response:
    response = Response(document.content, mimetype=document.mimetype)
    response.headers["Content-Disposition"] = document.content_disposition
    response.headers["Content-Length"] = str(len(document.content))
    return response


def _profile_from(data: Dict[str, Any]) -> CandidateProfile:
    # Accept both {resumeData: {...}} and the bare resume content
    return CandidateProfile.model_validate(data.get("resumeData") or data)


# ----------------------------------------------------------------------
# Documents
# ----------------------------------------------------------------------

@api.route('/export-docx', methods=['POST'])
def export_docx():
    """Export a resume or cover letter as DOCX."""
    data = _json_body()
    if not data.get("content") or not data.get("type"):
        raise InvalidRequestError("Missing required fields: content and type")

    export_request = ExportRequest.model_validate(data)
    document = document_service.build_document(export_request)
    logger.info(f"📄 Exported {export_request.type.value}: {document.filename}")
    return _docx_response(document)


@api.route('/generate-docx', methods=['POST'])
def generate_docx():
    """Export resume builder content as DOCX."""
    profile = CandidateProfile.model_validate(_json_body())
    document = document_service.export_resume(profile)
    logger.info(f"📄 Generated resume: {document.filename}")
    return _docx_response(document)


# ----------------------------------------------------------------------
# Matching
# ----------------------------------------------------------------------

@api.route('/match-jobs', methods=['POST'])
def match_jobs():
    """Rank the latest published jobs for a resume."""
    services = _services()
    profile = _profile_from(_json_body())

    jobs = services["repository"].list_jobs(
        status=JobStatus.PUBLISHED,
        limit=services["settings"].matching.jobs_to_consider,
    )
    if not jobs:
        return jsonify({"jobs": [], "message": "No jobs available for matching"})

    matches = services["matching"].match_jobs(profile, jobs)
    return jsonify({"jobs": [m.to_response() for m in matches]})


@api.route('/match-candidates', methods=['POST'])
def match_candidates():
    """Score every application of a job."""
    data = _json_body()
    job_id = data.get("jobId")
    if not job_id:
        raise InvalidRequestError("Job ID is required")
    company_id = _require_company()

    applications = _services()["matching"].match_candidates(
        job_id,
        description=data.get("description"),
        required_skills=data.get("requiredSkills"),
        company_id=company_id,
    )
    return jsonify({"success": True, "data": [a.to_dict() for a in applications]})


# ----------------------------------------------------------------------
# AI writing helpers
# ----------------------------------------------------------------------

@api.route('/generate-cover-letter', methods=['POST'])
def generate_cover_letter():
    data = _json_body()
    if not data.get("personalInfo") or not data.get("jobInfo"):
        raise InvalidRequestError("Personal info and job info are required")

    cover_letter = _services()["ai"].generate_cover_letter(
        PersonalInfo.model_validate(data["personalInfo"]),
        JobInfo.model_validate(data["jobInfo"]),
        data.get("userBackground") or "",
    )
    return jsonify({"success": True, "coverLetter": cover_letter})


@api.route('/enhance-paragraph', methods=['POST'])
def enhance_paragraph():
    data = _json_body()
    if not data.get("text") or not data.get("paragraphType"):
        raise InvalidRequestError("Text and paragraph type are required")

    job_info = JobInfo.model_validate(data["jobInfo"]) if data.get("jobInfo") else None
    enhanced = _services()["ai"].enhance_paragraph(data["text"], data["paragraphType"], job_info)
    return jsonify({"success": True, "enhancedText": enhanced})


@api.route('/enhance-section', methods=['POST'])
def enhance_section():
    data = _json_body()
    section = data.get("section")
    enhanced = _services()["ai"].enhance_section(
        section, data.get("content") or "", data.get("context") or {}
    )
    return jsonify({"enhancedContent": enhanced.strip(), "section": section})


@api.route('/enhance-resume', methods=['POST'])
def enhance_resume():
    profile = _profile_from(_json_body())
    return jsonify(_services()["ai"].enhance_resume(profile))


@api.route('/generate-resume', methods=['POST'])
def generate_resume():
    data = _json_body()
    resume_data = data.get("resumeData")
    if not resume_data:
        raise InvalidRequestError("Resume data is required")

    enhanced = _services()["ai"].generate_resume(
        resume_data, data.get("targetRole"), data.get("level")
    )
    return jsonify({"success": True, "enhancedResume": enhanced})


@api.route('/resume-analysis', methods=['POST'])
def resume_analysis():
    """Upload a resume file and get AI feedback."""
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise InvalidRequestError("No file uploaded")

    result = _services()["resumes"].analyze_upload(upload.filename, upload.read())
    return jsonify({"success": True, **result})


# ----------------------------------------------------------------------
# Companies
# ----------------------------------------------------------------------

@api.route('/companies', methods=['POST'])
def create_company():
    """Register a company; the calling user becomes its recruiter."""
    data = _json_body()
    user_id = _require_user()
    company = _services()["repository"].create_company(
        data.get("name"),
        owner_id=user_id,
        **{key: data.get(key) for key in COMPANY_PROFILE_FIELDS},
    )
    return jsonify({"success": True, "company": company}), 201


# ----------------------------------------------------------------------
# Jobs
# ----------------------------------------------------------------------

@api.route('/jobs', methods=['GET'])
def list_jobs():
    status = request.args.get("status")
    if status == "open":
        status = JobStatus.PUBLISHED
    elif status:
        status = status.upper()
        if status not in JobStatus.__members__:
            raise InvalidRequestError(f"Unknown job status: {request.args.get('status')}")
    limit = request.args.get("limit", default=10, type=int)

    jobs = _services()["repository"].list_jobs(
        status=status or None,
        limit=limit,
        company_id=request.args.get("companyId"),
    )
    return jsonify({"jobs": [job.to_response() for job in jobs]})


@api.route('/jobs', methods=['POST'])
def create_job():
    company_id = _require_company()
    job = JobPosting.model_validate(_json_body())
    created = _services()["repository"].create_job(company_id, job)
    return jsonify({"success": True, "job": created.to_response()}), 201


@api.route('/jobs/<job_id>', methods=['PATCH'])
def update_job(job_id):
    company_id = _require_company()
    updated = _services()["repository"].update_job(job_id, _json_body(), company_id=company_id)
    return jsonify({"success": True, "job": updated.to_response()})


# ----------------------------------------------------------------------
# Applications
# ----------------------------------------------------------------------

@api.route('/apply-job', methods=['POST'])
def apply_job():
    data = _json_body()
    job_id = data.get("jobId")
    if not job_id:
        raise InvalidRequestError("Job ID is required")
    user_id = _require_user()

    application = _services()["repository"].apply(
        job_id,
        user_id,
        resume_id=data.get("resumeId"),
        resume_url=data.get("resumeUrl"),
        cover_letter_url=data.get("coverLetterUrl"),
    )
    return jsonify({
        "success": True,
        "application": application.to_dict(),
        "message": "Application submitted successfully",
    })


@api.route('/apply-job', methods=['GET'])
def list_applications():
    """Applications to the calling company's jobs."""
    applications = _services()["repository"].list_applications(
        company_id=_require_company(),
        job_id=request.args.get("jobId"),
    )
    return jsonify({
        "applications": [a.to_dict() for a in applications],
        "total": len(applications),
    })


@api.route('/my-applications', methods=['GET'])
def my_applications():
    user_id = _require_user()
    applications = _services()["repository"].list_user_applications(user_id)
    return jsonify({"success": True, "applications": applications})


@api.route('/applications/<application_id>/status', methods=['PATCH'])
def update_application_status(application_id):
    company_id = _require_company()
    status = _json_body().get("status")
    if not status:
        raise InvalidRequestError("Status is required")

    application = _services()["repository"].update_application_status(application_id, status, company_id)
    return jsonify({"success": True, "application": application.to_dict()})


# ----------------------------------------------------------------------
# Saved resumes
# ----------------------------------------------------------------------

@api.route('/resumes', methods=['GET'])
def list_resumes():
    resumes = _services()["repository"].list_resumes(_require_user())
    return jsonify({"resumes": resumes, "total": len(resumes)})


@api.route('/resumes', methods=['POST'])
def save_resume():
    data = _json_body()
    if not data.get("content"):
        raise InvalidRequestError("Resume content is required")
    user_id = _require_user()

    resume = _services()["repository"].save_resume(
        user_id,
        data["content"],
        feedback=data.get("feedback"),
        file_url=data.get("fileUrl"),
        email=request.headers.get(EMAIL_HEADER, ""),
    )
    return jsonify({"success": True, "resume": resume, "message": "Resume saved successfully"})


@api.route('/resumes/<resume_id>', methods=['GET'])
def get_resume(resume_id):
    user_id = _require_user()
    repository = _services()["repository"]

    company_id = request.headers.get(COMPANY_HEADER)
    if company_id:
        repository.register_user(user_id, user_type="company", company_id=company_id)

    resume = repository.get_resume(resume_id, user_id)

    if request.args.get("download") == "true":
        profile = CandidateProfile.model_validate(resume["content"] or {})
        return _docx_response(document_service.export_resume(profile))
    return jsonify({"resume": resume})


@api.route('/resumes/<resume_id>', methods=['PUT'])
def update_resume(resume_id):
    data = _json_body()
    if not data.get("content"):
        raise InvalidRequestError("Resume content is required")
    user_id = _require_user()

    resume = _services()["repository"].update_resume(
        resume_id, user_id, data["content"], feedback=data.get("feedback")
    )
    return jsonify({"success": True, "resume": resume, "message": "Resume updated successfully"})


@api.route('/resumes/<resume_id>', methods=['DELETE'])
def delete_resume(resume_id):
    _services()["repository"].delete_resume(resume_id, _require_user())
    return jsonify({"success": True, "message": "Resume deleted successfully"})


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

def _register_error_handlers(app: Flask):
    @app.errorhandler(HireWiseError)
    def handle_domain_error(e: HireWiseError):
        if e.status_code >= 500:
            logger.error(f"❌ {request.method} {request.path}: {e.message} ({e.details})")
        else:
            logger.info(f"{request.method} {request.path} -> {e.status_code}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        details = e.errors(include_url=False, include_context=False, include_input=False)
        return jsonify({"error": "Invalid request data", "details": details}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.exception(f"❌ Unhandled error on {request.method} {request.path}: {e}")
        return jsonify({"error": "Internal server error", "details": str(e)}), 500


# ----------------------------------------------------------------------
# App factory
# ----------------------------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    ai_service: Optional[AIService] = None,
    session_factory: Optional[sessionmaker] = None,
) -> Flask:
    """
    Build the Flask application.

    Args:
        settings: Application settings (``get_settings()`` when omitted)
        ai_service: AI service override, mainly for tests
        session_factory: Database session factory override

    Returns:
        Configured Flask app
    """
    settings = settings or get_settings()
    session_factory = session_factory or create_session_factory(settings.storage.database_url)
    ai_service = ai_service or AIService(settings)

    repository = JobBoardRepository(session_factory)
    resume_service = ResumeService(settings, ai_service)
    matching_service = MatchingService(
        ai_service,
        repository=repository,
        resume_service=resume_service,
        min_fallback_score=settings.matching.min_fallback_score,
        max_fallback_results=settings.matching.max_fallback_results,
    )

    app = Flask(__name__)
    app.config["DEBUG"] = settings.debug
    # Room for multipart framing around the largest accepted file
    app.config["MAX_CONTENT_LENGTH"] = settings.storage.max_upload_bytes + MULTIPART_OVERHEAD_BYTES
    app.extensions["hirewise"] = {
        "settings": settings,
        "ai": ai_service,
        "repository": repository,
        "resumes": resume_service,
        "matching": matching_service,
    }

    app.register_blueprint(api)
    _register_error_handlers(app)

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(resume_service.uploads_dir.resolve(), filename, as_attachment=True)

    @app.route('/health')
    def health():
        return jsonify({"status": "ok", "ai": ai_service.available})

    logger.info(f"✅ HireWise API ready (AI {'enabled' if ai_service.available else 'disabled'})")
    return app
