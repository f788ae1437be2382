import pytest

from app import create_app
from player.player_state import PlayerState
from player.surface import RemoteSurface


class FakeTimer:
    def __init__(self, clock, interval, function):
        self.clock = clock
        self.interval = interval
        self.function = function
        self.due = None
        self.cancelled = False
        self.fired = False

    def start(self):
        self.due = self.clock.now + self.interval

    def cancel(self):
        self.cancelled = True


class FakeClock:
    """Manual clock driving FakeTimers; stands in for threading.Timer."""

    def __init__(self):
        self.now = 0.0
        self.timers = []
        self.fired_at = []

    def timer_factory(self, interval, function):
        timer = FakeTimer(self, interval, function)
        self.timers.append(timer)
        return timer

    def live(self):
        return [t for t in self.timers if t.due is not None and not t.cancelled and not t.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self.live() if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            timer.fired = True
            self.fired_at.append(self.now)
            timer.function()
        self.now = target


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def surface():
    return RemoteSurface()


@pytest.fixture
def player(surface, clock):
    p = PlayerState(
        media=surface,
        display=surface,
        viewport_width=1280,
        idle_timeout=3.0,
        timer_factory=clock.timer_factory,
        name="test",
    )
    p.load_source("https://cdn.example.com/one.mp4")
    return p


@pytest.fixture
def loaded_player(player):
    player.on_loaded_metadata(120)
    return player


@pytest.fixture
def app(clock):
    app = create_app(
        {
            "TESTING": True,
            "CATALOG_PATH": None,
            "ADMIN_USERNAME": "admin",
            "ADMIN_PASSWORD": "secret",
            "TIMER_FACTORY": clock.timer_factory,
            "PLAYER_CLOCK": lambda: clock.now,
        }
    )
    yield app
    app.extensions["players"].shutdown()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    resp = client.post("/api/admin/login", json={"username": "admin", "password": "secret"})
    token = resp.get_json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def movie_payload():
    return {
        "title": "The Matrix",
        "type": "movie",
        "image": "https://img.example.com/matrix.jpg",
        "movieLinks": [
            {"link": "https://cdn.example.com/matrix-1080.mp4", "source": "Server 1"},
            {"link": "https://cdn.example.com/matrix-720.mp4", "source": "Server 2"},
        ],
        "genre": "Action, Sci-Fi",
        "cast": ["Keanu Reeves", "Carrie-Anne Moss"],
        "description": "A computer hacker learns about the true nature of his reality.",
        "imdbRating": "8.7",
        "releaseDate": "1999-03-31",
        "quality": "HD",
        "duration": 136,
        "director": "Lana Wachowski, Lilly Wachowski",
        "subtitles": [{"link": "https://cdn.example.com/matrix.en.vtt", "language": "English"}],
    }


@pytest.fixture
def series_payload():
    return {
        "title": "Dark",
        "type": "series",
        "image": "https://img.example.com/dark.jpg",
        "movieLinks": [{"link": "https://cdn.example.com/dark-trailer.mp4", "source": "Trailer"}],
        "genre": ["Drama", "Mystery"],
        "description": "A family saga with a supernatural twist.",
        "releaseDate": "2017-12-01",
        "seasons": [
            {
                "seasonNumber": 1,
                "episodes": [
                    {"episodeNumber": 1, "title": "Secrets", "videoLinks": [{"link": "https://cdn.example.com/dark-s1e1.mp4"}], "duration": 51},
                    {"episodeNumber": 2, "title": "Lies", "videoLinks": [{"link": "https://cdn.example.com/dark-s1e2.mp4"}], "duration": 44},
                ],
            },
            {"seasonNumber": 2, "episodes": []},
        ],
    }
