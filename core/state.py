from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

@dataclass
class AppState:
    db_path: str
    restaurants_path: str
    restaurants: List[Any] = field(default_factory=list)   # core.restaurants.Restaurant
    data_error: Optional[str] = None                        # set when the dataset failed to load
    cfg: Dict[str, Any] = field(default_factory=dict)
