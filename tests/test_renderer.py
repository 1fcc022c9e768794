"""Tests for Markdown rendering and exports."""
import json

from app.models.schemas import PRDContent, PRDDocument
from app.services.prd_schema import SectionName
from app.services.renderer import (
    export_filename,
    export_json,
    export_markdown,
    render_markdown,
    render_section_text,
)
from tests.conftest import sample_prd_json


def test_section_headings_in_order():
    md = render_markdown(sample_prd_json())
    headings = [line for line in md.splitlines() if line.startswith("## ")]
    assert headings == [
        "## 1. Overview",
        "## 2. Features & Functionality",
        "## 3. Technology Stack",
        "## 4. AI Integration",
        "## 5. UI/UX Design",
        "## 6. Deployment",
        "## 7. Roadmap",
    ]


def test_layout_details():
    md = render_markdown(sample_prd_json("PlantPal"))
    lines = md.splitlines()
    assert lines[0] == "# PlantPal"
    assert md.count("\n---\n") == 6
    assert "**Idea Summary:** Personalized plant care kits delivered monthly  " in lines
    assert "- **Plant identification**  " in lines
    assert "- **Guest Users**: Browse sample kits  " in lines
    assert "  - Watering calendar  " in lines
    assert "5. **Launch:** Public launch in Q3  " in lines
    assert md.endswith("\n")


def test_rendering_is_deterministic_and_idempotent():
    content = sample_prd_json()
    first = render_markdown(content)
    reparsed = json.loads(json.dumps(PRDContent.model_validate(content).to_json_dict()))
    assert render_markdown(reparsed) == first
    assert render_markdown(PRDContent.model_validate(reparsed)) == first


def test_missing_ai_integration_renders_not_specified():
    content = sample_prd_json()
    del content["ai_integration"]
    md = render_markdown(content)
    assert "- **AI Model:** Not specified  " in md.splitlines()
    assert "ai_integration" not in PRDContent.model_validate(content).to_json_dict()


def test_lenient_field_shapes():
    content = sample_prd_json()
    content["tech_stack"]["frontend"] = ["React", "Tailwind"]
    content["ui_ux_design"]["key_elements"] = "Single element"
    md = render_markdown(content)
    assert "- **Frontend:** React, Tailwind  " in md.splitlines()
    assert "  - Single element  " in md.splitlines()


def test_section_text_dump():
    text = render_section_text(sample_prd_json(), SectionName.TECH_STACK)
    assert text == "Frontend: Next.js\nBackend: Python, FastAPI\nDatabase: PostgreSQL\nAuth: OAuth 2.0"


def _document() -> PRDDocument:
    content = sample_prd_json("My Cool App")
    return PRDDocument(
        id="abc",
        user_id="u1",
        title="My Cool App",
        description="d",
        markdown=render_markdown(content),
        json_data=content,
    )


def test_exports():
    doc = _document()
    assert export_markdown(doc) == doc.markdown
    assert export_json(doc) == json.dumps(doc.json_data, indent=2, ensure_ascii=False)
    assert json.loads(export_json(doc)) == doc.json_data


def test_export_filename():
    assert export_filename("My Cool  App", "md") == "my-cool-app.md"
    assert export_filename("Solo", "json") == "solo.json"
    assert export_filename("   ", "md") == "untitled-prd.md"
