REGULATIONS = ("GDPR", "CCPA", "LGPD", "PIPEDA", "General", "Custom")
SCOPES = ("Full Policy", "Specific Section", "Amendment Clause")

DEFAULT_REGULATION = "GDPR"
DEFAULT_SCOPE = "Full Policy"

_JSON_FIELDS = (
    "policy_title, policy_content, regulation_framework, scope_type, "
    "key_sections (array), compliance_notes, revision_suggestions"
)


def build_generate_message(scenario: str, regulation: str, scope: str) -> str:
    return f"""\
Generate a privacy policy draft for the following scenario:

Scenario: {scenario.strip()}
Target Regulation: {regulation}
Scope: {scope}

Please provide the output as JSON with these fields: {_JSON_FIELDS}."""


def build_revise_message(feedback: str) -> str:
    return f"""\
Please revise the previously generated privacy policy based on the following feedback:

{feedback.strip()}

Please provide the complete updated output as JSON with these fields: {_JSON_FIELDS}."""


def build_system_prompt() -> str:
    return """\
You are a privacy policy drafting assistant. You write clear, complete policy \
documents in markdown for the scenario, regulation and scope the user gives you.

Always answer with a single JSON object and nothing else. Use these fields:
- policy_title: short descriptive title
- policy_content: the full policy in markdown
- regulation_framework: the regulation the policy targets
- scope_type: the requested scope
- key_sections: array of section names in document order
- compliance_notes: what the draft covers for the regulation and what is missing
- revision_suggestions: concrete improvements the user could ask for next

When asked for a revision, return the complete revised document, not a diff."""
