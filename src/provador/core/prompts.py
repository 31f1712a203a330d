"""Tier-specific try-on prompts.

Every tier shares the same base instructions, which fix the invariants of a
usable try-on image:

- vertical (portrait) output with the subject photo's aspect ratio
- full body from head to feet, never cropping the head or face
- subject identity preserved (face, hair, skin tone, body shape, pose)
- a single photorealistic image with a naturally worn garment

Higher tiers append progressively stricter quality requirements.

Prompt Structure::

    [Fixed: base try-on instructions]

    [Tier quality block (balanced and premium only)]

    [Garment category hint (when supplied)]
"""

from __future__ import annotations

from provador.core.tiers import EscalationTier

_BASE_PROMPT = """You are an expert virtual try-on AI creating fashion photography.

TASK: Seamlessly dress the person in the FIRST image with the garment from the SECOND image.

ABSOLUTE REQUIREMENTS:
1. OUTPUT MUST BE VERTICAL (PORTRAIT) - Same orientation as the person photo
2. FULL BODY: Show complete person HEAD TO FEET - never crop head or face
3. EXACT ASPECT RATIO: Match the first image dimensions precisely
4. PRESERVE IDENTITY: Keep face, hair, skin tone, body shape, pose unchanged
5. NATURAL FIT: The garment should look naturally worn, not pasted on
6. PHOTOREALISTIC: Professional fashion photography quality

CRITICAL: Output a SINGLE image with VERTICAL orientation matching the input person photo."""

_TIER_REQUIREMENTS: dict[EscalationTier, str] = {
    EscalationTier.BALANCED: """QUALITY REQUIREMENTS:
- High resolution output
- Good fabric texture rendering
- Natural lighting integration
- Professional photography quality""",
    EscalationTier.PREMIUM: """PREMIUM QUALITY REQUIREMENTS:
- Ultra-high resolution output
- Perfect fabric texture and draping
- Accurate lighting and shadows
- Flawless blend between garment and body
- Studio-quality fashion photography finish
- Re-check the output before answering: no cropped head, no second person, no collage""",
}


def build_tryon_prompt(tier: EscalationTier, category: str | None = None) -> str:
    """Compile the prompt sent to the provider bound to *tier*.

    Args:
        tier: Escalation tier being attempted.
        category: Optional garment category hint (e.g. ``"upper_body"``).
            Blank values are omitted.

    Returns:
        The prompt, with sections separated by blank lines.
    """
    parts = [_BASE_PROMPT]

    requirements = _TIER_REQUIREMENTS.get(tier)
    if requirements:
        parts.append(requirements)

    if category and category.strip():
        parts.append(f"GARMENT CATEGORY: {category.strip()}")

    return "\n\n".join(parts)
