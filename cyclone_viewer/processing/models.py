"""
Forecast Model Classification

Static tables of known forecast models (default whitelist, categories,
colors) and the structural ensemble-member pattern (PHnn).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional
import re

from .tracks import StormTrack

TRACK_INTENSITY_MODELS = [
    'OFCL', 'OFCI', 'CARQ',
    'AVNO', 'AVNI', 'GFS',
    'GFDI', 'GFDL', 'GFDT', 'GFDN',
    'UKMI', 'UKM', 'UKX', 'UKXI', 'UKX2', 'UKM2',
    'CMC', 'HWRF', 'HMON',
    'EMXI', 'EMX', 'EMX2', 'ECMWF',
    'NGPS', 'NGPI', 'NGP2',
    'DSHP', 'SHIP', 'LGEM', 'SHFR', 'SHNS', 'DRCL',
]

TRACK_ONLY_MODELS = [
    'TVCN', 'TVCE', 'TVCX',
    'CONU', 'GUNA', 'GUNS', 'HCCA',
    'BAMD', 'BAMM', 'BAMS', 'LBAR', 'XTRP',
    'CLIP', 'CLP5', 'MRCL',
]

# Shown without explicit selection
DEFAULT_MODELS = frozenset(TRACK_INTENSITY_MODELS + TRACK_ONLY_MODELS)

MODEL_COLORS: Dict[str, str] = {
    # Official forecast products
    'OFCL': '#FFFFFF',
    'OFCI': '#F0F0F0',
    'CARQ': '#FFFFFF',
    'BEST': '#FFFFFF',
    # Major global models
    'AVNO': '#FF6B6B',
    'GFS': '#FF6B6B',
    'GFSO': '#FF6B6B',
    'HWRF': '#4D96FF',
    'HMON': '#6BCB77',
    'ECMF': '#FFD93D',
    'ECMWF': '#FFD93D',
    'EMXI': '#FFD93D',
    'UKM': '#B983FF',
    'UKMET': '#B983FF',
    'UKMI': '#B983FF',
    'CMC': '#FF9F45',
    'NVGM': '#FF7D9B',
    'CTCX': '#4D96FF',
    # Consensus models
    'TVCN': '#00CCCC',
    'TVCE': '#00AAAA',
    'TVCX': '#009999',
    'GUNA': '#AAFFAA',
    'GUNS': '#88FF88',
    'CONU': '#88DDDD',
    'HCCA': '#AADDFF',
    # Statistical & simpler models
    'DSHP': '#AAAAAA',
    'SHIP': '#BBBBBB',
    'LGEM': '#CCCCCC',
    'BAMD': '#DDDDDD',
    'BAMM': '#DDDDDD',
    'BAMS': '#DDDDDD',
    'LBAR': '#DDDDDD',
    'XTRP': '#DDDDDD',
}

FALLBACK_COLOR = '#AAAAAA'

ENSEMBLE_PATTERN = re.compile(r'^PH(\d{2})$')
ENSEMBLE_BASE_HUE = 180
ENSEMBLE_HUE_STEP = 15
ENSEMBLE_SATURATION = 80
ENSEMBLE_LIGHTNESS = 55


class ModelKind(str, Enum):
    EXACT = "exact"
    ENSEMBLE = "ensemble"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ModelCategory:
    id: str
    name: str
    models: Optional[List[str]] = None  # None means "any model"

    def contains(self, model: str) -> bool:
        if self.models is None:
            return True
        if self.id == 'ensemble':
            return ENSEMBLE_PATTERN.match(model) is not None
        return model in self.models


MODEL_CATEGORIES = [
    ModelCategory('all', 'All Models'),
    ModelCategory('track_intensity', 'Track & Intensity Models', TRACK_INTENSITY_MODELS),
    ModelCategory('track_only', 'Track-Only Models', TRACK_ONLY_MODELS),
    ModelCategory('ensemble', 'Ensemble Members', []),
]


@dataclass(frozen=True)
class ModelInfo:
    """Classification of one model code"""
    code: str
    kind: ModelKind
    display_name: str
    color: str
    is_default: bool
    category: Optional[str] = None
    member: Optional[int] = None
    hue: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            'code': self.code,
            'kind': self.kind.value,
            'displayName': self.display_name,
            'color': self.color,
            'isDefault': self.is_default,
            'category': self.category,
            'member': self.member,
        }


def ensemble_hue(member: int) -> int:
    return (ENSEMBLE_BASE_HUE + member * ENSEMBLE_HUE_STEP) % 360


def _category_of(code: str) -> Optional[str]:
    for category in MODEL_CATEGORIES:
        if category.models and code in category.models:
            return category.id
    return None


def classify_model(code: str) -> ModelInfo:
    """
    Classify a model code.

    Exact table entries take priority over the ensemble pattern; anything
    else is an unknown model with the fallback color.
    """
    if code in MODEL_COLORS or code in DEFAULT_MODELS:
        return ModelInfo(
            code=code,
            kind=ModelKind.EXACT,
            display_name=code,
            color=MODEL_COLORS.get(code, FALLBACK_COLOR),
            is_default=code in DEFAULT_MODELS,
            category=_category_of(code),
        )

    match = ENSEMBLE_PATTERN.match(code or '')
    if match:
        member = int(match.group(1))
        hue = ensemble_hue(member)
        return ModelInfo(
            code=code,
            kind=ModelKind.ENSEMBLE,
            display_name=f"Ensemble No. {member}",
            color=f"hsl({hue}, {ENSEMBLE_SATURATION}%, {ENSEMBLE_LIGHTNESS}%)",
            is_default=True,
            category='ensemble',
            member=member,
            hue=hue,
        )

    return ModelInfo(
        code=code,
        kind=ModelKind.UNKNOWN,
        display_name=code,
        color=FALLBACK_COLOR,
        is_default=False,
    )


def is_default_model(code: str) -> bool:
    return classify_model(code).is_default


def is_known_model(code: str) -> bool:
    return code in MODEL_COLORS or classify_model(code).kind == ModelKind.ENSEMBLE


def get_model_color(code: str) -> str:
    return classify_model(code).color


def get_model_display_name(code: str) -> str:
    return classify_model(code).display_name


def get_model_categories() -> List[ModelCategory]:
    return list(MODEL_CATEGORIES)


def get_category(category_id: str) -> Optional[ModelCategory]:
    for category in MODEL_CATEGORIES:
        if category.id == category_id:
            return category
    return None


def models_in_category(category_id: str, models: Iterable[str]) -> List[str]:
    """
    The codes in *models* that belong to a category, in their given order.

    Raises:
        ValueError: Unknown category id
    """
    category = get_category(category_id)
    if category is None:
        raise ValueError(f"Unknown model category '{category_id}'")
    return [model for model in models if category.contains(model)]


def select_tracks_for_display(
    tracks: Iterable[StormTrack],
    default_models_only: bool = True,
    category: Optional[str] = None,
) -> List[StormTrack]:
    """
    Filter tracks the way the model selector shows them.

    With ``default_models_only`` set, tracks of default models are kept;
    if none are present, tracks of any known model are kept instead.
    """
    selected = list(tracks)
    if default_models_only:
        defaults = [t for t in selected if is_default_model(t.model)]
        selected = defaults or [t for t in selected if is_known_model(t.model)]

    if category and category != 'all':
        wanted = set(models_in_category(category, {t.model for t in selected}))
        selected = [t for t in selected if t.model in wanted]
    return selected


def group_tracks_by_init_and_model(tracks: Iterable[StormTrack]) -> Dict[str, Dict[str, List[StormTrack]]]:
    """init time -> model -> tracks"""
    grouped: Dict[str, Dict[str, List[StormTrack]]] = {}
    for track in tracks:
        date_key = track.init_time or 'unknown'
        model = track.model or 'unknown'
        grouped.setdefault(date_key, {}).setdefault(model, []).append(track)
    return grouped


def list_init_times(tracks: Iterable[StormTrack]) -> List[str]:
    """Unique init times, most recent first"""
    return sorted({t.init_time for t in tracks}, reverse=True)


__all__ = [
    'DEFAULT_MODELS',
    'MODEL_CATEGORIES',
    'MODEL_COLORS',
    'ModelCategory',
    'ModelInfo',
    'ModelKind',
    'classify_model',
    'ensemble_hue',
    'get_category',
    'get_model_categories',
    'get_model_color',
    'get_model_display_name',
    'group_tracks_by_init_and_model',
    'is_default_model',
    'is_known_model',
    'list_init_times',
    'models_in_category',
    'select_tracks_for_display',
]
