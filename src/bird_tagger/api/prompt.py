from typing import List

from pydantic import BaseModel, Field

"""
Prompt and response schema for bird identification.
"""


class BirdDetection(BaseModel):
    family: str
    genus: str
    species: str
    confidence: float = Field(ge=0.0, le=1.0)


class BirdsResponse(BaseModel):
    birds: List[BirdDetection] = Field(default_factory=list)


PROMPT_TEMPLATE = """
You identify birds in photographs taken by a birdwatcher.

Identify every clearly visible bird in the image and return STRICT JSON ONLY:
{
  "birds": [
    {"family": "<family>", "genus": "<genus>", "species": "<species common name>", "confidence": <0..1>}
  ]
}
Rules:
- One entry per distinct bird subject, most prominent bird first.
- confidence is a number between 0 and 1, rounded to two decimals.
- If the image contains no bird, return {"birds": []}.
- If you are unsure, give a confidence below 0.6 and your most likely species,
  or use "unknown" as the species.
- No extra text or markdown. JSON only.

Example:
{"birds": [{"family": "Anatidae", "genus": "Anas", "species": "Mallard", "confidence": 0.92}]}
""".strip()
