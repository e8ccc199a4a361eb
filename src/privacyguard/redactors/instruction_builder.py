"""Natural-language redaction instructions for an image-editing model.

The instruction text is the only control the system has over the
generation model; nothing guarantees the model limits its edits to the
listed regions.
"""

from typing import Iterable, List

from ..models.entities import PiiDetection, RedactionStyle, normalize_category
from ..sanitizer import DEFAULT_NATIONAL_ID_CATEGORIES

MASK_CHAR = "X"


def placeholder_text(value: str) -> str:
    """Replace every visible character with ``X``, keeping whitespace layout."""
    return "".join(ch if ch.isspace() else MASK_CHAR for ch in value)


_MASK_TEMPLATE = """You are an expert image editor specializing in high-fidelity document redaction.
Your task is to edit the provided image to mask specific areas containing Personally Identifiable Information (PII).

**Instructions:**
1. Analyze the provided image.
2. Cover the areas defined by the following bounding box coordinates with solid, opaque rectangles filled with {fill_color}.
3. Do NOT alter any other part of the image. The final image must be a perfect, high-quality copy of the original with only the specified areas redacted.
4. Do not add any text, watermarks, or other artifacts. The redaction must be clean and precise.

**PII to redact:**
{items}
"""

_PLACEHOLDER_TEMPLATE = """You are an expert document recreation specialist. Your task is to create a visually perfect, high-fidelity replica of the provided document image with specific modifications. You must not alter any part of the image except for the specific instructions below. The final image must have the same dimensions, quality, and background as the original.

**MODIFICATION INSTRUCTIONS:**

1. **Blur Photos:**
{blur_items}

2. **Replace Text with Placeholders:**
For each item below, find the original text inside its bounding box and replace it with the placeholder text. You MUST use the following styling for the placeholder text:
- **Font Family**: 'Inter', 'Arial', sans-serif (use a clean, neutral sans-serif font).
- **Font Weight**: 600 (semi-bold).
- **Font Size**: You MUST exactly match the font size of the original text being replaced.
- **Color**: {text_color}.
- **Letter Spacing**: 0.5px.
- **Text Transform**: Uppercase.
- **Alignment**: Left-aligned to the original text's starting position.

**Text to Replace:**
{text_items}

**CRITICAL RULES:**
- Do not draw boxes or borders around the redacted areas.
{keep_rules}- All other text, logos, and design elements of the original document must be preserved perfectly.
"""


class RedactionInstructionBuilder:
    """Turn detections into an instruction for the image-editing model."""

    def __init__(
        self,
        style: RedactionStyle = RedactionStyle.PLACEHOLDER,
        keep_categories: Iterable[str] = ("Gender",),
        national_id_categories: Iterable[str] = DEFAULT_NATIONAL_ID_CATEGORIES,
        fill_color: str = "black",
        text_color: str = "#222222",
        blur_strength_px: int = 12,
    ):
        self.style = style
        self.keep_categories = list(keep_categories)
        self._keep_keys = {normalize_category(c) for c in self.keep_categories}
        self._national_id_keys = {normalize_category(c) for c in national_id_categories}
        self.fill_color = fill_color
        self.text_color = text_color
        self.blur_strength_px = blur_strength_px

    def redactable(self, detections: List[PiiDetection]) -> List[PiiDetection]:
        """Detections that yield an instruction line.

        Unlocalized detections are never sent to the model; in placeholder
        style the keep-categories are left as they are.
        """
        selected = [
            d for d in detections
            if d.bounding_box is not None and not d.bounding_box.is_degenerate
        ]
        if self.style is RedactionStyle.PLACEHOLDER:
            selected = [d for d in selected if d.category_key not in self._keep_keys]
        return selected

    def build(self, detections: List[PiiDetection]) -> str:
        """Return the instruction text, or "" when nothing needs redacting."""
        selected = self.redactable(detections)
        if not selected:
            return ""
        if self.style is RedactionStyle.MASK:
            return self._build_mask(selected)
        return self._build_placeholder(selected)

    def _build_mask(self, selected: List[PiiDetection]) -> str:
        items = "\n".join(
            f"- A {d.category} located at bounding box {d.bounding_box.describe()}."
            for d in selected
        )
        return _MASK_TEMPLATE.format(fill_color=self.fill_color, items=items)

    def _build_placeholder(self, selected: List[PiiDetection]) -> str:
        blur_lines: List[str] = []
        text_lines: List[str] = []

        for d in selected:
            bbox = d.bounding_box.describe()
            if d.is_photo:
                blur_lines.append(
                    f"- Apply a Gaussian blur (strength: {self.blur_strength_px}px) "
                    f"to the area within bounding box {bbox}."
                )
            elif d.category_key in self._national_id_keys:
                text_lines.append(
                    f'- Replace the text "{d.value}" (the leading digits of the {d.category}) '
                    f'inside {bbox} with "{placeholder_text(d.value)}". '
                    "The remaining digits must stay untouched."
                )
            else:
                text_lines.append(
                    f'- Replace the text "{d.value}" inside {bbox} '
                    f'with "{placeholder_text(d.value)}".'
                )

        keep_rules = "".join(
            f"- The '{c}' field should remain unchanged.\n" for c in self.keep_categories
        )
        if any(d.category_key in self._national_id_keys for d in selected):
            keep_rules += "- The trailing digits of identity numbers must remain visible and untouched.\n"

        return _PLACEHOLDER_TEMPLATE.format(
            blur_items="\n".join(blur_lines) or "- None.",
            text_items="\n".join(text_lines) or "- None.",
            text_color=self.text_color,
            keep_rules=keep_rules,
        )
