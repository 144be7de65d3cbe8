"""
Snap2Slides Backend: Content Analysis Helpers
===============================================

What:  Pure functions that build provider prompts and read structure and
       quality signals out of the vision provider's text response.
Who:   Used by SlideService while assembling the upload response.

Expected Vision Response Layout (requested by EXTRACTION_PROMPT):
    DOCUMENT TYPE: <type>

    EXTRACTED TEXT CONTENT:
    <every visible word>

    VISUAL ELEMENTS:
    <charts, tables>

    ACTUAL CONTENT SLIDES:
    Slide 1: ...
    ...
    Slide 10: ...

Quality Score:
    +20  extracted text longer than 100 chars
    +20  more than 50 words
    +15  contains numbers
    +15  contains two-word capitalised names
    +10  contains dates
    +10  8 or more slides
    +10  mentions "Action Items" or "Next Steps"
    -25  contains placeholder phrases
    +15  extracted text longer than 200 chars and no placeholders
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

EXTRACTION_PROMPT = """Analyze this image/document and extract ALL ACTUAL CONTENT to create valuable slides with REAL information.

MANDATORY EXTRACTION RULES:
1. EXTRACT EVERY VISIBLE WORD - Read all text exactly as written in the document
2. NO PLACEHOLDER CONTENT - Use only actual content found in the document
3. IF NO CONTENT EXISTS for a section, write "No [topic] content found in document"
4. NEVER USE "(Not applicable)" - Use actual extracted content or state content is missing

EXTRACTION PROCESS:
Step 1: READ ALL TEXT word-for-word from the document
Step 2: IDENTIFY all numbers, dates, names, amounts, percentages
Step 3: EXTRACT all visual data from charts, tables, graphs
Step 4: CREATE slides using ONLY the actual extracted content

FORMAT RESPONSE AS:

DOCUMENT TYPE: [What type of document this actually is]

EXTRACTED TEXT CONTENT:
[Write out EVERY word visible in the document exactly as shown]
[Include headers, body text, captions, footnotes, table data]
[Preserve numbers, dates, names, amounts exactly]

VISUAL ELEMENTS:
[Describe any charts, graphs, tables with their actual data values]

ACTUAL CONTENT SLIDES:

Slide 1: Document Overview
- Title: [Exact title from document or "Untitled document"]
- Type: [Actual document type identified]
- Main content: [Primary subject matter based on extracted text]
- Key elements: [Actual important elements found]

Slide 2: All Extracted Text
- Complete text content: [All visible text organized by paragraphs]
- Headers/sections: [Actual section titles found]
- Important statements: [Key sentences from document]

Slide 3: Numbers & Data Points
- Financial amounts, percentages, quantities and dates found in the document

Slide 4: Names & People
- Individual names, organizations, contact info and roles found in the document

Slide 5: Action Items
- Tasks, deadlines, responsibilities and requirements stated in the document

Slide 6: Business Information
- Purpose, processes, policies and strategic points found in the document

Slide 7: Technical Content
- Specifications, systems, procedures and standards found in the document

Slide 8: Legal/Compliance
- Legal terms, regulations, agreements and compliance items found in the document

Slide 9: Financial Information
- Budget items, costs, revenue and financial terms found in the document

Slide 10: Implementation & Next Steps
- Next actions, timeline, follow-up and contacts found in the document

CRITICAL RULE: Use ONLY content actually extracted from the document. If no relevant content exists for a slide, write "No specific [topic] content found in this document" instead of creating generic placeholder text."""

SLIDE_JSON_PROMPT = """Analyze this image and provide:
1. A descriptive title for a presentation slide
2. Key points that could be extracted from this image
3. Suggested slide content or talking points
4. Any text visible in the image

Please format the response as JSON with the following structure:
{
  "title": "slide title",
  "keyPoints": ["point 1", "point 2", "point 3"],
  "content": "detailed description",
  "extractedText": "any text found in image"
}"""

PLACEHOLDER_PHRASES = (
    "(Not applicable)",
    "No specific",
    "Not available",
    "Generic content",
    "Standard template",
)

RESEARCH_CATEGORIES = [
    "Business Value",
    "Risk Assessment",
    "Implementation Guide",
    "Strategic Opportunities",
    "Stakeholder Support",
    "Action Planning",
]

_EXTRACTED_TEXT_RE = re.compile(r"EXTRACTED TEXT CONTENT:([\s\S]*?)VISUAL ELEMENTS:")
_DOCUMENT_TYPE_RE = re.compile(r"DOCUMENT TYPE:[ \t]*(.+)")
_SLIDE_RE = re.compile(r"Slide \d+:")
_NUMBER_RE = re.compile(r"\d+")
_NAME_RE = re.compile(r"[A-Z][a-z]+\s+[A-Z][a-z]+")
_DATE_RE = re.compile(r"\d{1,2}/\d{1,2}/\d{4}|\d{4}-\d{2}-\d{2}|\w+\s+\d{1,2},?\s+\d{4}")

# (minimum score, quality level, comprehensiveness), checked top-down
_QUALITY_LEVELS: List[Tuple[int, str, str]] = [
    (90, "Exceptional", "Maximum Value"),
    (75, "High Professional", "Business-Ready"),
    (60, "Professional", "Good"),
    (40, "Standard", "Adequate"),
]


@dataclass
class QualityAssessment:
    score: int
    level: str
    comprehensiveness: str
    word_count: int
    data_points: int
    entities: int
    dates: int
    slide_count: int
    has_placeholders: bool


def extract_text_section(content: str) -> Optional[str]:
    """Text between EXTRACTED TEXT CONTENT: and VISUAL ELEMENTS:, stripped."""
    match = _EXTRACTED_TEXT_RE.search(content)
    if not match:
        return None
    return match.group(1).strip() or None


def document_type(content: str) -> str:
    match = _DOCUMENT_TYPE_RE.search(content)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return "Image Analysis"


def count_slides(content: str) -> int:
    return len(_SLIDE_RE.findall(content))


def has_placeholders(content: str) -> bool:
    return any(phrase in content for phrase in PLACEHOLDER_PHRASES)


def assess_quality(content: str, extracted_text: Optional[str]) -> QualityAssessment:
    """
    Score how much real content the vision provider extracted.

    Args:
        content:        Full provider response
        extracted_text: Output of extract_text_section(content)
    """
    text = extracted_text or ""
    word_count = len(text.split()) if text else 0
    data_points = len(_NUMBER_RE.findall(text))
    entities = len(_NAME_RE.findall(text))
    dates = len(_DATE_RE.findall(text))
    slide_count = count_slides(content)
    placeholders = has_placeholders(content)

    score = 0
    if len(text) > 100:
        score += 20
    if word_count > 50:
        score += 20
    if data_points > 0:
        score += 15
    if entities > 0:
        score += 15
    if dates > 0:
        score += 10
    if slide_count >= 8:
        score += 10
    if "Action Items" in content or "Next Steps" in content:
        score += 10
    if placeholders:
        score -= 25
    if len(text) > 200 and not placeholders:
        score += 15

    level, comprehensiveness = "Basic", "Standard"
    for minimum, name, depth in _QUALITY_LEVELS:
        if score >= minimum:
            level, comprehensiveness = name, depth
            break

    return QualityAssessment(
        score=score,
        level=level,
        comprehensiveness=comprehensiveness,
        word_count=word_count,
        data_points=data_points,
        entities=entities,
        dates=dates,
        slide_count=slide_count,
        has_placeholders=placeholders,
    )


def build_research_query(content: str, extracted_text: Optional[str]) -> str:
    """Research prompt built from the first 1000 chars and the exact extracted text."""
    analysis = content[:1000]
    exact = f'EXACT EXTRACTED TEXT: "{extracted_text.strip()}"\n\n' if extracted_text else ""
    return (
        f'Based on this extracted document content: "{analysis}"\n\n'
        f"{exact}"
        "Provide PRACTICAL, VALUE-ADDING insights that make this content MORE USEFUL:\n\n"
        "1. CONTENT VALIDATION & ENHANCEMENT: verify key facts and figures, "
        "provide missing context, explain technical terms.\n"
        "2. BUSINESS VALUE AMPLIFICATION: revenue opportunities, cost savings, "
        "competitive positioning.\n"
        "3. RISK ASSESSMENT & MITIGATION: regulatory, financial and operational risks "
        "with mitigation strategies.\n"
        "4. IMPLEMENTATION SUCCESS FACTORS: critical success factors, common pitfalls, "
        "resource requirements.\n"
        "5. STAKEHOLDER & DECISION SUPPORT: who should review this and which "
        "decision criteria apply.\n"
        "6. DATA-DRIVEN INSIGHTS: industry benchmarks for any metrics mentioned.\n"
        "7. ACTIONABLE NEXT STEPS: immediate actions, a 30-60-90 day roadmap and "
        "key questions to ask stakeholders.\n"
        "8. STRATEGIC OPPORTUNITIES: links to broader strategy and long-term implications.\n\n"
        "Focus on making the extracted content IMMEDIATELY ACTIONABLE and "
        "STRATEGICALLY VALUABLE for business decisions."
    )


def summarize_research(insights: str) -> dict:
    """Shape of the research block attached to an analysis response."""
    return {
        "has_research": True,
        "research_quality": "Business Value Enhancement Grade",
        "insight_count": len([line for line in insights.split("\n") if line.strip()]),
        "categories": list(RESEARCH_CATEGORIES),
        "has_follow_up_questions": "questions" in insights or "NEXT STEPS" in insights,
        "has_market_insights": "business" in insights or "strategic" in insights,
    }


def format_label(mime_type: str) -> str:
    """'image/png' → 'PNG'; anything without a subtype → 'UNKNOWN'."""
    _, _, subtype = mime_type.partition("/")
    return subtype.upper() if subtype else "UNKNOWN"


def build_offline_content(filename: str, size_bytes: int, mime_type: str) -> str:
    """
    Demo slide content returned when no vision endpoint could serve the upload.

    Keeps the same section layout as a real response so the client renders it.
    """
    size_mb = f"{size_bytes / 1024 / 1024:.2f}"
    now = datetime.now(timezone.utc)
    kind = "Image Document" if "image" in mime_type else "Digital File"
    return f"""
DOCUMENT TYPE: Image Document Analysis (Offline Mode)

EXTRACTED TEXT CONTENT:
OFFLINE MODE: AI services are unavailable. Generating demo content based on file: "{filename}"

File Analysis Summary:
- Filename: {filename}
- File Size: {size_mb} MB
- Format: {format_label(mime_type)}
- Upload Time: {now.strftime("%Y-%m-%d %H:%M:%S")} UTC

VISUAL ELEMENTS:
Document appears to contain visual content requiring AI analysis. Showing demo analysis structure.

DEMO SLIDES:

Slide 1: Document Overview
- Title: Analysis of {filename}
- Document Type: {kind}
- Size: {size_mb} MB
- Processing Date: {now.strftime("%Y-%m-%d")}

Slide 2: File Information
- Original Filename: {filename}
- File Format: {mime_type}
- Upload Status: Successfully received
- Processing Mode: Offline demonstration

Slide 3: Content Analysis Capability
- Text Recognition: OCR technology available
- Visual Element Detection: Chart and table analysis
- Data Extraction: Numbers, dates, names identification
- Business Insights: Strategic recommendations generation

Slide 4: Expected Output Quality
- Text Accuracy: High-precision OCR results
- Data Points: Structured information extraction
- Business Value: Actionable recommendations

Slide 5: API Quota Status
- Current Status: Provider quota exceeded or keys disabled
- Reset Time: Quotas reset daily
- Solution: Upgrade to paid tier for sustained access

Slide 6: Next Steps for Full Functionality
- API Configuration: Set up a paid Google Cloud account
- Quota Management: Monitor usage and limits
- Alternative: Try again after quota reset

Slide 7: Demo Content Notice
- This Content: Generated for demonstration purposes
- Real Analysis: Requires active AI services

Slide 8: Technical Requirements
- Internet Connection: Required for AI processing
- API Keys: Valid Google Gemini credentials needed
"""
