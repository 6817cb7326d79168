from dataclasses import dataclass

from core.daily_rollover import env_float, env_int

# Daily spin window [start, end) in roulette-local hours
SPIN_WINDOW_START = env_int("SPIN_WINDOW_START", 0, minimum=0, maximum=23)
SPIN_WINDOW_END = env_int("SPIN_WINDOW_END", 10, minimum=0, maximum=24)
SPIN_SECONDS = env_float("SPIN_SECONDS", 3.0)
STATUS_ROTATE_SECONDS = env_float("STATUS_ROTATE_SECONDS", 15.0)

# Reward codes handed out after a spin (drawn independently of the wheel)
DISCOUNT_CODES = [
    "SNACK10",
    "MIDNIGHT15",
    "LATEBITE20",
    "NIGHTOWL5",
    "CRAVE25",
    "MUNCHIES12",
]


@dataclass(frozen=True)
class Friend:
    id: str
    name: str
    avatar: str
    is_online: bool


# Simulated roster; there is no presence backend
FRIENDS = [
    Friend(id="1", name="Alice", avatar="🧑", is_online=True),
    Friend(id="2", name="Bob", avatar="🧑", is_online=False),
    Friend(id="3", name="Charlie", avatar="🧑", is_online=True),
    Friend(id="4", name="Diana", avatar="🧑", is_online=True),
    Friend(id="5", name="Eve", avatar="🧑", is_online=False),
    Friend(id="6", name="Frank", avatar="🧑", is_online=True),
    Friend(id="7", name="Grace", avatar="🧑", is_online=True),
    Friend(id="8", name="Henry", avatar="🧑", is_online=False),
]

FRIEND_STATUSES = [
    "Alice is enjoying Tacos at Taco Time",
    "Bob just ordered a Double Burger at Burger Joint",
    "Charlie is eating Pizza Paradise right now",
    "Diana recommends the spicy ramen at Midnight Ramen",
    "Eve is on her way to Tasty Bites",
    "Frank just finished his meal at Pizza Paradise",
    "Grace loves the dessert at Midnight Ramen",
]
