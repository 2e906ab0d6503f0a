COVERAGE_SYSTEM = (
    "You are a careful scientific reviewer. Be faithful to the provided paper metadata.\n"
    "Rate how much the claim is supported by the listed papers. Do not invent sources."
)

COVERAGE_PAPER = """[{index}] {title} ({year}) by {authors}
ID: {id}
Abstract: {abstract}"""

COVERAGE_USER = """Claim:
{claim}

Papers (metadata only):
{papers}

Task:
1) For each paper, rate coverage_percent (0-100): how much this paper supports/substantiates the claim. Add a short rationale and a verdict in {{"supports","partial","contradicts","irrelevant"}}.
2) Give an overall judgment: does the claim "follow" from the joint evidence? Provide coverage_percent (0-100), a confidence (0-1), and a brief explanation grounded in the above.

Output STRICT JSON ONLY, no prose, matching this schema:

{{
  "overall": {{
    "follows": boolean,
    "coverage_percent": number,
    "confidence": number,
    "explanation": string
  }},
  "per_paper": [
    {{
      "id": string,
      "title": string,
      "coverage_percent": number,
      "verdict": "supports" | "partial" | "contradicts" | "irrelevant",
      "rationale": string
    }}
  ]
}}

Use the given paper "id" and "title" in each item.
"""

PAPER_SUMMARY_SYSTEM = (
    "You are a concise academic assistant. Be faithful to the input text. No speculation."
)

PAPER_SUMMARY_USER = """Summarize this paper in 6 short bullets (<=20 words each).
Include: problem, method/idea, domain/datasets, key results, limitations, and contribution.
If abstract is missing, say "No abstract available".

Title: {title}
Authors: {authors}
Year: {year}
Abstract: {abstract}
"""

PROJECT_SUMMARY_SYSTEM = (
    "You are an expert reviewer. Produce a faithful, well-structured synthesis. Cite papers by [#]."
)

PROJECT_SUMMARY_USER = """Using ONLY the bullet summaries below, synthesize a 250-300 word literature review.
Include: (1) consensus, (2) disagreements, (3) gaps/opportunities, (4) concrete next steps.
Refer to specific papers by [#].

Summaries:
{summaries}
"""
