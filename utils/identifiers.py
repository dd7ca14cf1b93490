import random
import time


def generate_order_number() -> str:
    """EGG + last 6 digits of the millisecond clock + 3 random digits."""
    timestamp = str(int(time.time() * 1000))
    return f"EGG{timestamp[-6:]}{random.randint(0, 999):03d}"
