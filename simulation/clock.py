# simulation/clock.py


class SimClock:
    """
    Horloge de simulation partagée par le monde et les routeurs.
    """

    def __init__(self, start=0.0):
        self.time = float(start)

    def __str__(self):
        return f"SimClock(t={self.time})"

    def advance(self, dt):
        self.time += dt
        return self.time

    def set_time(self, t):
        self.time = float(t)
