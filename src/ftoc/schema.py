from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel


class WarningSettingDTO(BaseModel):
    enabled: Optional[bool] = None
    severity: Optional[str] = None
    alternatives: Optional[List[str]] = None


class WarningsSectionDTO(BaseModel):
    disabled: List[str] = []
    tag_quality: Dict[str, Union[bool, WarningSettingDTO]] = {}
    anti_patterns: Dict[str, Union[bool, WarningSettingDTO]] = {}


class TagsSectionDTO(BaseModel):
    priority: List[str] = []
    type: List[str] = []
    status: List[str] = []
    low_value: List[str] = []


class ThresholdsSectionDTO(BaseModel):
    max_steps: Optional[int] = None
    min_steps: Optional[int] = None
    min_examples: Optional[int] = None
    max_tags: Optional[int] = None
    max_scenario_name_length: Optional[int] = None
    max_step_length: Optional[int] = None


class VocabularySectionDTO(BaseModel):
    ui_patterns: List[str] = []
    implementation_patterns: List[str] = []
    pronouns: List[str] = []
    conjunctions: List[str] = []


class ConfigDocumentDTO(BaseModel):
    warnings: WarningsSectionDTO = WarningsSectionDTO()
    tags: TagsSectionDTO = TagsSectionDTO()
    thresholds: ThresholdsSectionDTO = ThresholdsSectionDTO()
    vocabulary: VocabularySectionDTO = VocabularySectionDTO()
