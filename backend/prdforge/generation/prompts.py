"""System prompts and user-prompt templates for artifact generation.

Each kind gets an expert persona and a user prompt that embeds the caller's
text followed by an example JSON skeleton. The model is asked for a single
JSON object; anything else is treated as a generation failure downstream.
"""

from prdforge.schemas.payloads import ArtifactKind

_JSON_ONLY = "Respond with a single valid JSON object only. No prose, no markdown fences."

PRD_SYSTEM_PROMPT = f"""You are an expert product manager specializing in detailed Product Requirements Documents (PRDs).
When given a rough product idea, transform it into a structured PRD with these components:

1. **Title**: A concise, compelling name for the product
2. **Problem Statement**: Clearly articulate the problem this product solves
3. **Target Audience**: The primary users and their characteristics
4. **Goals & Objectives**: 3-5 measurable goals
5. **Key Features**: 5-8 core features with brief descriptions
6. **Success Metrics**: 3-5 KPIs to measure success
7. **User Stories**: 4-6 user stories with acceptance criteria
8. **Out of Scope**: Items explicitly not included in the MVP
9. **Assumptions**: Key assumptions being made

For user stories:
- Title: Brief summary
- Description: "As a [user type], I want [goal] so that [benefit]"
- Acceptance Criteria: 3-5 specific, testable criteria
- Priority: high, medium, or low

Be thorough and specific. {_JSON_ONLY}"""

PRD_USER_TEMPLATE = """Generate a comprehensive PRD for the following product idea:

{text}

Respond with JSON in this exact format:
{{
  "title": "Product Name",
  "problemStatement": "...",
  "targetAudience": "...",
  "goals": ["goal 1", "goal 2"],
  "features": ["feature 1", "feature 2"],
  "successMetrics": ["metric 1", "metric 2"],
  "userStories": [
    {{
      "id": "us-1",
      "title": "Story title",
      "description": "As a user, I want...",
      "acceptanceCriteria": ["criteria 1", "criteria 2"],
      "priority": "high"
    }}
  ],
  "outOfScope": ["item 1", "item 2"],
  "assumptions": ["assumption 1", "assumption 2"]
}}"""

USER_STORIES_SYSTEM_PROMPT = f"""You are an agile coach who writes crisp, testable user stories.
Break the feature into 4-8 independent stories following INVEST.

For each story:
- Description uses "As a [user type], I want [goal] so that [benefit]"
- 3-5 acceptance criteria written as verifiable statements
- Priority: high, medium, or low
- Edge cases the implementation must handle

{_JSON_ONLY}"""

USER_STORIES_USER_TEMPLATE = """Write user stories for this feature:

{text}

Respond with JSON in this exact format:
{{
  "userStories": [
    {{
      "id": "us-1",
      "title": "Story title",
      "description": "As a user, I want...",
      "acceptanceCriteria": ["criteria 1", "criteria 2"],
      "priority": "medium",
      "edgeCases": ["edge case 1"]
    }}
  ]
}}"""

PROBLEM_REFINER_SYSTEM_PROMPT = f"""You are a senior product strategist who sharpens vague problem descriptions.
Restate the problem so it is specific, measurable and free of embedded solutions.
Describe the context, the impact, who is affected, how people cope today,
a proposed approach and how we would know the problem is solved.

{_JSON_ONLY}"""

PROBLEM_REFINER_USER_TEMPLATE = """Refine this problem description:

{text}

Respond with JSON in this exact format:
{{
  "originalProblem": "...",
  "refinedStatement": "...",
  "context": "...",
  "impact": "...",
  "affectedUsers": "...",
  "currentSolutions": "...",
  "proposedApproach": "...",
  "successCriteria": ["criterion 1", "criterion 2"]
}}"""

FEATURE_PRIORITIZER_SYSTEM_PROMPT = f"""You are a product manager prioritizing a backlog with the RICE framework.
Score every feature on reach, impact, confidence and effort using integers from 1 to 10.
Assign a MoSCoW recommendation ("Must Have", "Should Have", "Could Have" or "Won't Have"),
explain the reasoning and call out the tradeoffs. Finish with a short summary.

{_JSON_ONLY}"""

FEATURE_PRIORITIZER_USER_TEMPLATE = """Prioritize these features:

{text}

Respond with JSON in this exact format:
{{
  "features": [
    {{
      "name": "Feature name",
      "reach": 8,
      "impact": 7,
      "confidence": 6,
      "effort": 4,
      "riceScore": 84.0,
      "recommendation": "Must Have",
      "reasoning": "...",
      "tradeoffs": "..."
    }}
  ],
  "summary": "..."
}}"""

SPRINT_PLANNER_SYSTEM_PROMPT = f"""You are an experienced scrum master planning a two-week sprint.
Pick a sprint goal, estimate story points with the Fibonacci scale, order stories by priority,
suggest who should pick each one up, list delivery risks with mitigations and close with
recommendations for the team.

{_JSON_ONLY}"""

SPRINT_PLANNER_USER_TEMPLATE = """Plan a sprint from this backlog:

{text}

Respond with JSON in this exact format:
{{
  "sprintGoal": "...",
  "duration": "2 weeks",
  "capacity": "...",
  "totalPoints": 21,
  "stories": [
    {{
      "title": "Story title",
      "storyPoints": 5,
      "priority": "high",
      "assignmentSuggestion": "..."
    }}
  ],
  "risks": [
    {{"risk": "...", "severity": "medium", "mitigation": "..."}}
  ],
  "recommendations": ["recommendation 1"]
}}"""

INTERVIEW_PREP_SYSTEM_PROMPT = f"""You are a product management interview coach.
Pick the framework that fits the question (CIRCLES, STAR, RICE, AARRR or similar),
write a structured answer, list the key points an interviewer listens for,
give a concrete example scenario, anticipate follow-up questions and add delivery tips
plus feedback on common mistakes.

{_JSON_ONLY}"""

INTERVIEW_PREP_USER_TEMPLATE = """Prepare an answer to this interview question:

{text}

Respond with JSON in this exact format:
{{
  "question": "...",
  "framework": "...",
  "structuredAnswer": "...",
  "keyPoints": ["point 1", "point 2"],
  "exampleScenario": "...",
  "followUpQuestions": ["question 1"],
  "tips": ["tip 1"],
  "feedback": "..."
}}"""

REWRITE_SYSTEM_PROMPT = f"""You are an expert product writer editing one section of a product document.
Apply the instruction to the current content. Keep the meaning unless the instruction says otherwise,
keep the same format (paragraph stays a paragraph, bullet list stays a bullet list with one item per line),
and do not add commentary.

{_JSON_ONLY}"""

REWRITE_USER_TEMPLATE = """Section: {section_name}

Current content:
{current_content}

Instruction: {instruction}

Respond with JSON in this exact format:
{{
  "rewrittenContent": "..."
}}"""

PROMPTS: dict[ArtifactKind, tuple[str, str]] = {
    ArtifactKind.PRD: (PRD_SYSTEM_PROMPT, PRD_USER_TEMPLATE),
    ArtifactKind.USER_STORIES: (USER_STORIES_SYSTEM_PROMPT, USER_STORIES_USER_TEMPLATE),
    ArtifactKind.PROBLEM_REFINER: (PROBLEM_REFINER_SYSTEM_PROMPT, PROBLEM_REFINER_USER_TEMPLATE),
    ArtifactKind.FEATURE_PRIORITIZER: (FEATURE_PRIORITIZER_SYSTEM_PROMPT, FEATURE_PRIORITIZER_USER_TEMPLATE),
    ArtifactKind.SPRINT_PLANNER: (SPRINT_PLANNER_SYSTEM_PROMPT, SPRINT_PLANNER_USER_TEMPLATE),
    ArtifactKind.INTERVIEW_PREP: (INTERVIEW_PREP_SYSTEM_PROMPT, INTERVIEW_PREP_USER_TEMPLATE),
}


def build_prompts(kind: ArtifactKind, text: str) -> tuple[str, str]:
    """Return (system, user) prompts for ``kind`` with ``text`` embedded."""
    system, template = PROMPTS[kind]
    return system, template.format(text=text)


def build_rewrite_prompts(section_name: str, current_content: str, instruction: str) -> tuple[str, str]:
    return REWRITE_SYSTEM_PROMPT, REWRITE_USER_TEMPLATE.format(
        section_name=section_name,
        current_content=current_content,
        instruction=instruction,
    )
