from __future__ import annotations

RESUME_SCHEMA = """
- summary: string
- skills: string[]
- experiences: array of objects with keys title, company, period, location (strings) and bullets (string[])
- projects: array of objects with keys name, description (strings) and stack (string[])
- education: array of objects with keys institution, degree, location, period (strings)
""".strip()

BUILD_RESUME_SYSTEM = (
    "You generate ATS-optimized resumes in JSON for frontend developers "
    "applying to U.S./Canada remote jobs."
)

BUILD_RESUME_PROMPT = """
You are an expert resume writer for frontend developers from the Middle East applying to U.S. and Canadian remote roles.

The user has provided several answers about their experience. Some or all may be in Arabic. Your tasks:

1. If the text is Arabic, interpret and translate it into professional English appropriate for a resume. Do NOT translate technology names (React, API, Docker, Tailwind, etc.).
2. Create a concise professional summary (2-3 sentences) suitable for North American ATS. No personal information.
3. Infer a list of frontend skills: frameworks, libraries, styling tools, build tools, testing tools, and APIs where applicable.
4. Build 3-6 bullet points focusing on impact and measurable outcomes where possible.
5. Extract education if mentioned (institution, degree, location, period).
6. Extract any concrete projects with stack.

Return ONLY valid JSON with keys:
{schema}

User answers:
{answers}
""".strip()

PARSE_RESUME_SYSTEM = "You convert unstructured resumes into JSON for frontend developers."

PARSE_RESUME_PROMPT = """
You are converting an existing resume into structured JSON for a frontend developer applying to U.S./Canada remote roles.

The text may be in Arabic, English, or a mix.

Tasks:
1. Interpret all content, translating Arabic into professional English where necessary. Do NOT translate technology names.
2. Extract a concise professional summary (2-3 sentences).
3. Extract technical skills as a flat list.
4. Extract work experience entries with title, company, period, location (if present) and bullet points.
5. Extract projects with name, description, and technology stack.
6. Extract education entries.

Return ONLY valid JSON with keys:
{schema}

Raw resume text:
{resume_text}
""".strip()

IMPROVE_SUMMARY_SYSTEM = "You rewrite resume summaries for software engineers. Be concise and impact-focused."

IMPROVE_SUMMARY_PROMPT = """
You are helping a frontend engineer rewrite their resume summary for US/Canada tech companies.

Original summary:
"{summary}"

Rewrite this as a single resume summary paragraph, {tone_hint}.
- Keep it 3-4 lines.
- Do not add personal details.
- Write directly in English.
Return ONLY the rewritten summary text.
""".strip()

SUMMARY_MODE_HINTS = {
    "concise": "more concise, while keeping impact and key metrics",
    "technical": "more technical, with specific tools and metrics",
}
SUMMARY_DEFAULT_HINT = "more polished and professional, with strong action verbs and impact"

IMPROVE_EXPERIENCE_SYSTEM = "You rewrite resume bullet points for software engineers. Focus on measurable impact."

IMPROVE_EXPERIENCE_PROMPT = """
You are helping a frontend engineer rewrite the bullet points for a single job in their resume.

Job:
- Title: {title}
- Company: {company}
- Period: {period}

Current bullet points:
{bullets}

Rewrite these bullet points to be {tone_hint}.
Guidelines:
- Return 3-6 bullet points.
- Each bullet should start with a strong verb.
- Focus on impact, metrics, and technologies used.
- Keep everything in English.
Return ONLY the new bullet points as a numbered list.
""".strip()

EXPERIENCE_MODE_HINTS = {
    "concise": "more concise, merging or shortening where possible",
}
EXPERIENCE_DEFAULT_HINT = "more impact-focused, with strong action verbs and measurable outcomes where possible"

REFINE_RESUME_SYSTEM = "You refine resumes for frontend developers, returning JSON in the exact same structure."

REFINE_RESUME_PROMPT = """
You are refining a resume JSON for a frontend developer applying to U.S./Canada remote roles.

Rewrite the following fields:
- summary
- experience bullets
- project descriptions

Rules:
- Keep the overall structure and factual content.
- Use {tone_description}.
- Do NOT invent new jobs or projects.
- You may add light quantification ONLY if it is strongly implied.

Return ONLY valid JSON with the same structure as the input resume JSON.

Current resume JSON:
{resume_json}
""".strip()

REFINE_TONES = {
    "technical": "very technical, emphasizing technologies, architecture, and performance metrics",
    "confident": "confident and impact-focused, with strong action verbs and clear achievements",
    "neutral": "neutral, concise, and professional with balanced tone",
}

GENERATE_BULLETS_SYSTEM = "You write concise, impact-focused resume bullet points for frontend developers."

GENERATE_BULLETS_PROMPT = """
You are generating strong resume bullet points for a frontend developer experience entry.

Context:
- Title: {title}
- Company: {company}
- Period: {period}
- Location: {location}
- Tech stack: {tech_stack}
- Existing bullets:
{existing_bullets}

Job description snippet (if any):
{job_snippet}

Tasks:
1. Propose 3-5 NEW bullet points for this job that are concise, use strong action verbs, and focus on measurable impact.
2. Do NOT repeat existing bullets.
3. Assume U.S./Canada remote role standards and tone.

Return ONLY valid JSON with keys:
- bullets: string[]
""".strip()

COVER_LETTER_SYSTEM = (
    "You are a precise assistant that writes clean, ATS-friendly cover letter text. "
    "Output plain text only, no markdown, no bullet lists."
)

COVER_LETTER_PROMPT = """
You write cover letters for software engineers applying to U.S. and Canadian tech companies.

Write a cover letter {target_role}.

Candidate:
- Name: {name}
- Title: {title}
- Location: {location}

Summary:
{summary}

Key skills:
{skills}

Experience highlights:
{experience_lines}

Tone:
- Use a {tone_hint}
- Write in English.
- Assume the candidate is based in MENA and applying for remote-friendly work.

Formatting rules:
- Return plain text ONLY (no markdown, no bullet lists, no code fences).
- Include a greeting (e.g., "Dear Hiring Manager,").
- 3-5 short paragraphs.
- End with a professional closing like "Sincerely," followed by their name ({name}).
- Do NOT include the date or company address block at the top.
- Do NOT include the candidate's email/phone in the body.
""".strip()

COVER_LETTER_TONES = {
    "technical": "slightly more technical, mentioning relevant tools and technologies, but still understandable to a recruiter.",
    "confident": "confident and impact-focused, but still professional and not arrogant.",
    "neutral": "neutral, professional tone suitable for most U.S./Canada tech companies.",
}

JOB_COVER_LETTER_SYSTEM = (
    "You write concise, professional cover letters for frontend developers "
    "applying to U.S./Canada remote roles."
)

JOB_COVER_LETTER_PROMPT = """
You are writing a cover letter for a frontend developer from the Middle East applying for a U.S./Canada remote role.

Use:
- Candidate info:
  - Name: {name}
  - Title: {title}
  - Location: {location}
- Resume JSON:
{resume_json}

- Job description:
{job_description}

Write a 3-4 paragraph cover letter that:
- Is targeted to this specific job.
- Highlights relevant frontend experience and stack.
- Mentions remote collaboration, time zones, and communication when relevant.
- Uses {tone_description}.
- Does NOT include a street address or overly personal details.
- Uses a simple sign-off like: "Best regards, [Name]".

Return ONLY the plain text cover letter. No JSON, no explanations.
""".strip()

JOB_COVER_LETTER_TONES = {
    "technical": "slightly technical tone, referencing modern frontend tools and practices",
    "confident": "confident, impact-oriented tone that shows enthusiasm for the role",
    "neutral": "neutral and professional tone suitable for North American companies",
}

TAILOR_RESUME_SYSTEM = "You are an ATS optimization assistant. Return ONLY valid JSON."

TAILOR_RESUME_PROMPT = """
You are tailoring a resume to a specific job posting and estimating how well it matches.

Rules:
- Keep every job, project, and degree factual. Do NOT invent employers or titles.
- Reorder and rephrase skills, summary, and bullets to surface what the job asks for.
- Estimate an ATS match score from 0 to 100 based on keywords and structure.

Return ONLY valid JSON with keys:
- tailoredResumeJson: object with keys
{schema}
- atsScore: number (0..100)
- missingSkills: string[] (skills worth highlighting that the resume lacks)
- presentKeywords: string[] (job keywords already present in the resume)
- missingKeywords: string[] (job keywords absent from the resume)
- jobTitle: string or null
- jobCompany: string or null

Resume JSON:
{resume_json}

Job posting (link or full description):
{job_input}
""".strip()
