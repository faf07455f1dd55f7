"""Prompt text and fallback payloads for the AI service."""

import copy

JSON_ONLY = "Always respond with valid JSON only, no markdown or commentary."

# ---------------------------------------------------------------------------
# Job matching
# ---------------------------------------------------------------------------

MATCH_JOBS_SYSTEM = f"""You are a professional career advisor and job matching expert.
Provide accurate, helpful job matching analysis. {JSON_ONLY}"""

MATCH_JOBS_TEMPLATE = """Analyze this resume and match it with the following job postings.

RESUME DATA:
{profile}

AVAILABLE JOBS:
{jobs}

For each job, provide a match score (0-100) and reasons why it matches or doesn't match. Focus on:
1. Skill alignment with job requirements
2. Experience relevance to the role
3. Education background fit
4. Career progression potential

Respond with a JSON array of the top matching jobs (minimum score 25), highest first:
[
  {{
    "jobId": "<id from the list>",
    "matchScore": 85,
    "matchReasons": ["Strong React skills match"],
    "improvementSuggestions": ["Consider learning TypeScript"]
  }}
]"""

JOB_ENTRY_TEMPLATE = """{index}. [id: {id}] {title} at {company}
   Location: {location}
   Salary: {salary}
   Description: {description}
   Requirements: {requirements}"""

# ---------------------------------------------------------------------------
# Candidate scoring
# ---------------------------------------------------------------------------

SCORE_CANDIDATE_SYSTEM = f"You are an expert recruiter. {JSON_ONLY}"

SCORE_CANDIDATE_TEMPLATE = """Analyze how well the candidate's resume and cover letter match the job requirements.

Job Description:
{description}

Required Skills:
{skills}

Resume:
{resume}

{cover_letter}

Weights: required skills 40%, experience relevance 30%, overall qualification fit 20%,
communication and presentation 10%. Score each category 0-100 with a brief justification.

Respond as JSON:
{{
  "skillsMatch": {{"score": 0, "justification": ""}},
  "experienceRelevance": {{"score": 0, "justification": ""}},
  "qualificationFit": {{"score": 0, "justification": ""}},
  "communication": {{"score": 0, "justification": ""}},
  "finalScore": 0
}}"""

# ---------------------------------------------------------------------------
# Cover letters
# ---------------------------------------------------------------------------

COVER_LETTER_SYSTEM = (
    "You are a professional career counselor and expert cover letter writer. "
    "Generate compelling, personalized cover letters that help candidates stand out."
)

COVER_LETTER_TEMPLATE = """Generate a professional cover letter with the following information:

Personal Information:
- Name: {full_name}
- Email: {email}
- Phone: {phone}
- Address: {address}

Job Information:
- Position: {position}
- Company: {company}
- Hiring Manager: {hiring_manager}
- Job Source: {job_source}

User Background: {background}

Write four paragraphs:
1. Introduction - interest in the position and how it was found
2. Body paragraph 1 - relevant experience, skills, and achievements
3. Body paragraph 2 - why this company and how the candidate can contribute
4. Closing - thanks and enthusiasm for next steps

Return exactly this JSON:
{{
  "introduction": "...",
  "bodyParagraph1": "...",
  "bodyParagraph2": "...",
  "closing": "..."
}}"""

ENHANCE_PARAGRAPH_SYSTEM = (
    "You are a professional career counselor and expert cover letter writer. "
    "Enhance cover letter paragraphs to be more compelling, specific, and professional "
    "while maintaining the original intent and tone."
)

# Keyed by cover letter paragraph name; unknown names use the default
ENHANCE_PARAGRAPH_INSTRUCTIONS = {
    "introduction": "Enhance this cover letter introduction paragraph{context}. Make it more engaging, "
                    "professional, and compelling while maintaining the core message. Keep it concise but impactful",
    "bodyParagraph1": "Enhance this cover letter body paragraph about experience and skills{context}. "
                      "Make it more specific, quantifiable, and compelling",
    "bodyParagraph2": "Enhance this cover letter body paragraph about company interest{context}. Make it more "
                      "specific about why the candidate wants to work for this company",
    "closing": "Enhance this cover letter closing paragraph{context}. Make it more professional, confident, "
               "and action-oriented while maintaining appropriate courtesy",
}
ENHANCE_PARAGRAPH_DEFAULT = "Enhance this cover letter paragraph{context}. Make it more professional, engaging, and compelling"

ENHANCE_PARAGRAPH_TEMPLATE = """{instruction}:

Original: "{text}"

Enhanced version:"""


def fallback_cover_letter(full_name: str, position: str, company: str, job_source: str = "") -> dict:
    """Template paragraphs used when the model answer cannot be parsed."""
    source = f"I discovered this opportunity through {job_source} and " if job_source else ""
    return {
        "introduction": (
            f"I am writing to express my strong interest in the {position} position at {company}. "
            f"{source}I am excited about the possibility of contributing to your team."
        ),
        "bodyParagraph1": (
            "With my background and experience, I believe I would be a valuable addition to your "
            "organization. My skills and dedication make me well-suited for this role, and I am eager "
            f"to bring my expertise to help {company} achieve its goals."
        ),
        "bodyParagraph2": (
            f"I am particularly drawn to {company} because of its reputation and commitment to "
            "excellence. I am confident that my passion and skills align well with your company's "
            "values and objectives, and I would welcome the opportunity to contribute to your "
            "continued success."
        ),
        "closing": (
            "Thank you for considering my application. I would welcome the opportunity to discuss "
            f"how my background and enthusiasm can contribute to {company}. I look forward to "
            f"hearing from you soon.\n\nSincerely,\n{full_name}"
        ),
    }


# ---------------------------------------------------------------------------
# Resume sections
# ---------------------------------------------------------------------------

ENHANCE_SECTION_SYSTEM = (
    "You are a professional resume expert and career counselor. Provide enhanced, professional "
    "content that is natural, compelling, and tailored to job market expectations."
)

# Context keys read per section, with the text shown when a key is missing
SECTION_CONTEXT = {
    "summary": (
        "Enhance this professional summary to be more compelling and professional. "
        "Keep it 2-3 sentences with strong, action-oriented language.",
        (("Name", "fullName", "Professional"),
         ("Experience Level", "experienceCount", "0 positions"),
         ("Education", "educationLevel", "Not specified"),
         ("Key Skills", "topSkills", "Various skills")),
    ),
    "experience": (
        "Enhance this work experience description. Use strong action verbs, quantify achievements "
        "where possible, and format it as bullet points using •.",
        (("Job Title", "position", "Professional Role"),
         ("Company", "company", "Company"),
         ("Duration", "duration", "Time period")),
    ),
    "education": (
        "Enhance this education description. Highlight relevant coursework, projects, or "
        "achievements and connect them to career goals.",
        (("Degree", "degree", "Degree"),
         ("Field", "field", "Field of Study"),
         ("School", "school", "Institution"),
         ("GPA", "gpa", "Not specified")),
    ),
    "skills": (
        "Enhance this skills overview. Showcase technical and soft skills in 2-3 concise sentences.",
        (("Individual Skills", "skillsList", "Various technical skills"),
         ("Experience Level", "experienceLevel", "Professional level"),
         ("Industry Focus", "industry", "General professional")),
    ),
}

ENHANCE_SECTION_TEMPLATE = """{instruction}

Current content: "{content}"

Context:
{context}

Return only the enhanced text, no additional formatting or explanations."""

# ---------------------------------------------------------------------------
# Whole resume
# ---------------------------------------------------------------------------

ENHANCE_RESUME_SYSTEM = (
    "You are a professional resume expert and career counselor. Provide detailed, actionable "
    f"advice to improve resumes. {JSON_ONLY}"
)

ENHANCE_RESUME_TEMPLATE = """Analyze and enhance the following resume:

{profile}

Skills Overview: {skills_description}

Respond with JSON of this structure:
{{
  "summary": "enhanced professional summary (2-3 sentences)",
  "improvements": ["3-5 specific improvement suggestions"],
  "keywords": ["8-12 relevant industry keywords"],
  "enhancedExperiences": [{{"id": "original_id", "description": "enhanced description"}}],
  "enhancedEducation": [{{"id": "original_id", "description": "enhanced description"}}],
  "enhancedSkillsDescription": "enhanced skills overview",
  "suggestedSkills": ["5-8 additional relevant skills"],
  "overallScore": "score from 1-10 with brief explanation"
}}"""

GENERATE_RESUME_SYSTEM = (
    "You are a professional resume writer with expertise in creating compelling resumes that pass "
    "ATS systems and attract hiring managers. Focus on quantifiable achievements, action verbs, "
    f"and industry-specific keywords. {JSON_ONLY}"
)

GENERATE_RESUME_TEMPLATE = """Based on the following resume data, generate professional, well-structured resume content.
{target}
Resume Data:
{resume_json}

Improve the summary, experience descriptions (quantified achievements), education and skills
presentation for ATS compatibility. Return a JSON object with the same structure as the input
but with enhanced content."""


def fallback_resume_enhancement(profile) -> dict:
    """Generic suggestions shaped like an enhance-resume answer."""
    summary = profile.personal_info.summary
    if summary:
        summary = (
            f"{summary} Enhanced with AI-driven insights, this professional demonstrates strong "
            "capabilities in their field with proven experience and technical expertise."
        )
    else:
        summary = (
            "Dynamic professional with demonstrated expertise and a track record of delivering results "
            "in challenging environments. Skilled in collaborative problem-solving and innovative solutions."
        )

    experiences = []
    for exp in profile.experiences:
        if exp.description:
            lines = [
                f"• Achieved measurable results in {exp.position} role at {exp.company}",
                "• Led cross-functional initiatives that improved operational efficiency",
                "• Demonstrated expertise in industry best practices and emerging technologies",
                "• Collaborated with diverse teams to deliver high-impact projects",
            ]
        else:
            lines = [
                f"• Managed key responsibilities in {exp.position} role with proven success",
                "• Developed innovative solutions to complex business challenges",
                "• Applied technical expertise to drive continuous improvement",
                "• Built strong relationships with stakeholders and team members",
            ]
        experiences.append({"id": exp.id, "description": "\n".join(lines)})

    return {
        "summary": summary,
        "improvements": [
            "Add quantifiable achievements with specific numbers and percentages",
            "Use stronger action verbs to start each bullet point",
            "Include industry-specific keywords for better ATS compatibility",
            "Highlight leadership and collaboration experiences",
            "Add relevant certifications or technical proficiencies",
        ],
        "keywords": [
            "Leadership", "Project Management", "Data Analysis", "Problem Solving",
            "Team Collaboration", "Strategic Planning", "Process Improvement",
            "Customer Service", "Technical Skills", "Communication",
        ],
        "enhancedExperiences": experiences,
        "enhancedEducation": [
            {
                "id": edu.id,
                "description": (
                    f"Relevant coursework and projects in {edu.field}. Developed strong analytical and "
                    "problem-solving skills through academic research and practical applications."
                ),
            }
            for edu in profile.education
        ],
        "enhancedSkillsDescription": profile.skills_description or (
            "Comprehensive technical skill set with expertise in modern tools and methodologies. "
            "Proven ability to adapt to new technologies and deliver high-quality results in "
            "fast-paced environments."
        ),
        "suggestedSkills": [
            "Project Management", "Data Analysis", "Leadership", "Communication",
            "Problem Solving", "Team Collaboration", "Strategic Planning",
        ],
        "overallScore": (
            "7/10 - Strong foundation with excellent potential for enhancement through quantifiable "
            "achievements and keyword optimization"
        ),
    }


# ---------------------------------------------------------------------------
# Uploaded resume review
# ---------------------------------------------------------------------------

RESUME_ANALYSIS_SYSTEM = f"""You are a professional resume reviewer with 15+ years of experience in hiring
and recruitment across various industries. Analyze the resume and give detailed, actionable feedback.
{JSON_ONLY}

Respond with:
{{
  "overallScore": 0-100,
  "summary": "2-3 sentence overall assessment",
  "sectionAnalysis": {{
    "structure": {{"score": 0, "feedback": "", "strengths": [], "improvements": []}},
    "language": {{"score": 0, "feedback": "", "strengths": [], "improvements": []}},
    "experienceMatch": {{"score": 0, "feedback": "", "strengths": [], "improvements": []}},
    "skillsPresentation": {{"score": 0, "feedback": "", "strengths": [], "improvements": []}},
    "education": {{"score": 0, "feedback": "", "strengths": [], "improvements": []}}
  }},
  "missingElements": [],
  "improvementSuggestions": [
    {{"category": "High Priority", "suggestions": []}},
    {{"category": "Medium Priority", "suggestions": []}},
    {{"category": "Low Priority", "suggestions": []}}
  ],
  "atsCompatibility": {{"score": 0, "feedback": "", "issues": [], "recommendations": []}},
  "industryRelevance": {{"detectedIndustry": "", "relevanceScore": 0, "feedback": "", "keywords": []}}
}}"""

RESUME_ANALYSIS_TEMPLATE = "Please analyze this resume and provide comprehensive feedback: {resume}"

_DEFAULT_RESUME_FEEDBACK = {
    "overallScore": 75,
    "summary": "Resume analysis completed. Please review the detailed feedback below.",
    "sectionAnalysis": {
        "structure": {"score": 75, "feedback": "Resume structure appears adequate.", "strengths": [], "improvements": []},
        "language": {"score": 80, "feedback": "Language and tone are professional.", "strengths": [], "improvements": []},
        "experienceMatch": {"score": 70, "feedback": "Experience section needs enhancement.", "strengths": [], "improvements": []},
        "skillsPresentation": {"score": 75, "feedback": "Skills are clearly presented.", "strengths": [], "improvements": []},
        "education": {"score": 80, "feedback": "Education section is well-formatted.", "strengths": [], "improvements": []},
    },
    "missingElements": ["Quantified achievements", "Professional summary", "Relevant keywords"],
    "improvementSuggestions": [
        {"category": "High Priority", "suggestions": ["Add quantified results to experience section"]},
        {"category": "Medium Priority", "suggestions": ["Improve professional summary"]},
        {"category": "Low Priority", "suggestions": ["Optimize formatting"]},
    ],
    "atsCompatibility": {"score": 70, "feedback": "Resume should be more ATS-friendly.", "issues": [], "recommendations": []},
    "industryRelevance": {
        "detectedIndustry": "General",
        "relevanceScore": 70,
        "feedback": "Resume appears suitable for general applications.",
        "keywords": [],
    },
}


def default_resume_feedback() -> dict:
    """Fresh copy of the feedback returned when the model answer is unusable."""
    return copy.deepcopy(_DEFAULT_RESUME_FEEDBACK)
