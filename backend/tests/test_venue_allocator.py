from app.services.venue_allocator import VenueAllocator, suggest_split


def test_pick_prefers_smallest_fitting_venue(make_venue):
    venues = [make_venue(capacity=300), make_venue(capacity=60), make_venue(capacity=120)]
    allocator = VenueAllocator()

    assert allocator.pick(50, venues).capacity == 60
    assert allocator.pick(100, venues).capacity == 120
    assert allocator.pick(250, venues).capacity == 300


def test_pick_returns_none_when_nothing_fits(make_venue):
    venues = [make_venue(capacity=100), make_venue(capacity=200)]
    assert VenueAllocator().pick(201, venues) is None
    assert VenueAllocator().pick(10, []) is None


def test_equal_venues_rotate_between_calls(make_venue):
    venues = [make_venue(id="a", capacity=80), make_venue(id="b", capacity=80), make_venue(id="c", capacity=200)]
    allocator = VenueAllocator()

    picks = [allocator.pick(50, venues).id for _ in range(4)]

    assert picks == ["a", "b", "a", "b"]


def test_overflow_tolerance_only_applies_without_exact_fit(make_venue):
    venues = [make_venue(id="small", capacity=100), make_venue(id="large", capacity=200)]
    allocator = VenueAllocator(overflow_tolerance=0.10)

    assert allocator.pick(150, venues).id == "large"
    assert allocator.pick(215, venues).id == "large"
    assert allocator.pick(221, venues) is None


def test_suggest_split(make_course, make_venue):
    venues = [make_venue(capacity=300), make_venue(capacity=150)]

    split = suggest_split(make_course(code="CS101", class_size=500), venues)

    assert split is not None
    assert split.groups == 2
    assert split.suggested_size == 250
    assert split.venue.capacity == 300
    assert suggest_split(make_course(class_size=200), venues) is None
