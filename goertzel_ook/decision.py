"""
goertzel_ook.decision
On/off-keying decision: carrier present when the magnitude is strictly
above the threshold. A tie means no carrier.
"""


def decide(magnitude: int, threshold: int) -> bool:
    return magnitude > threshold
