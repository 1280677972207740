from policy_drafter.policy_record import PolicyRecord

SAMPLE_SCENARIO = (
    "We are launching a new mobile application in the EU market and need a comprehensive "
    "privacy policy that covers user data collection, third-party analytics, and push notifications."
)

_SAMPLE_CONTENT = """\
# Privacy Policy

**Effective Date:** January 1, 2025

## 1. Introduction

This Privacy Policy explains how we collect, use, disclose, and safeguard your personal data \
when you use our mobile application ("App"), in accordance with the General Data Protection \
Regulation (GDPR).

## 2. Data Controller

- **Company Name:** Example Corp
- **Address:** 123 Privacy Lane, Berlin, Germany
- **DPO Contact:** dpo@example.com

## 3. Data We Collect

### 3.1 Data You Provide
- Account registration information (name, email address)
- Profile information
- Communications and feedback

### 3.2 Automatically Collected Data
- Device identifiers
- Usage analytics
- IP address and approximate location

## 4. Legal Basis for Processing

1. **Consent** - Where you have given explicit consent
2. **Contract** - Processing necessary to perform our contract with you
3. **Legitimate Interest** - Improving our services and security

## 5. Your Rights Under GDPR

- **Right to Access** - Request a copy of your personal data
- **Right to Rectification** - Correct inaccurate data
- **Right to Erasure** - Request deletion of your data
- **Right to Data Portability** - Receive your data in a structured format
- **Right to Object** - Object to processing based on legitimate interest
- **Right to Restrict Processing** - Limit how we use your data

## 6. Data Retention

We retain personal data only as long as necessary for the purposes in this policy, unless \
the law requires a longer period.

## 7. International Transfers

Transfers outside the EEA are protected by appropriate safeguards, including Standard \
Contractual Clauses.

## 8. Contact Us

For questions about this Privacy Policy, contact our Data Protection Officer at dpo@example.com."""

# Shown instead of the session's latest draft while sample mode is on.
SAMPLE_POLICY = PolicyRecord(
    title="Privacy Policy for Mobile Application - GDPR Compliance",
    content=_SAMPLE_CONTENT,
    regulation_framework="GDPR",
    scope_type="Full Policy",
    key_sections=(
        "Introduction",
        "Data Controller",
        "Data Collection",
        "Legal Basis",
        "User Rights",
        "Data Retention",
        "International Transfers",
        "Contact Information",
    ),
    compliance_notes=(
        "This policy includes all GDPR-required disclosures including lawful basis for processing, "
        "data subject rights, DPO contact details, and international transfer mechanisms. Consider "
        "adding specific cookie policy details and third-party processor list as annexes."
    ),
    revision_suggestions=(
        "Consider adding: (1) Specific data retention periods per data category, (2) Detailed cookie "
        "policy or reference to standalone cookie notice, (3) List of third-party data processors, "
        "(4) Automated decision-making disclosure if applicable, (5) Children's data handling section "
        "if the app may be accessed by minors."
    ),
)
