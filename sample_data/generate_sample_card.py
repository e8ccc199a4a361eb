"""Generate a synthetic identity card image for trying out the redaction demo.

Usage:
    python sample_data/generate_sample_card.py

All values on the card are fictitious.
"""

from PIL import Image, ImageDraw, ImageFont

CARD_SIZE = (1000, 630)


def _font(size: int):
    try:
        return ImageFont.truetype("DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default()


def create_sample_card(output_path: str = "sample_data/sample_id_card.png") -> str:
    """Draw a card with a name, year of birth, gender, ID number and photo area."""
    card = Image.new("RGB", CARD_SIZE, "#fdfaf3")
    draw = ImageDraw.Draw(card)

    # Header band
    draw.rectangle([0, 0, CARD_SIZE[0], 90], fill="#f28c28")
    draw.text((40, 25), "SAMPLE IDENTITY AUTHORITY", font=_font(36), fill="white")

    # Portrait placeholder
    draw.rectangle([50, 140, 290, 440], fill="#cbd5e1", outline="#475569", width=3)
    draw.ellipse([120, 180, 220, 280], fill="#94a3b8")
    draw.rectangle([100, 300, 240, 430], fill="#94a3b8")

    body = _font(30)
    fields = [
        ("Name", "Priya Ramesh Nair"),
        ("Year of Birth", "1991"),
        ("Gender", "Female"),
    ]
    y = 160
    for label, value in fields:
        draw.text((340, y), f"{label}: {value}", font=body, fill="#111827")
        y += 70

    # 12-digit number printed in groups of four
    draw.text((300, 520), "4821 7730 1956", font=_font(48), fill="#111827")
    draw.line([0, 600, CARD_SIZE[0], 600], fill="#16a34a", width=8)

    card.save(output_path)
    print(f"Sample card written to: {output_path}")
    return output_path


if __name__ == "__main__":
    create_sample_card()
