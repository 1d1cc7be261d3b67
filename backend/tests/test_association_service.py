from sqlmodel import Session

from studygroup import models, repositories, services
from studygroup.database import engine


def _reload(account_id):
    """Load the account in a brand-new session, as a later request would."""
    with Session(engine) as s:
        account = repositories.AccountRepository(s).get(account_id)
        return sorted(t.title for t in account.tags), sorted(str(z) for z in account.zones)


def test_add_then_remove_tag(session, keesun):
    tag = services.TagService(session).resolve_or_create_tag("newTag")
    assoc = services.AssociationService(session)

    assoc.add_tag(keesun, tag)
    assert _reload(keesun.id)[0] == ["newTag"]

    assoc.remove_tag(keesun, tag)
    assert _reload(keesun.id)[0] == []


def test_add_tag_twice_keeps_one_member(session, keesun):
    tag = services.TagService(session).resolve_or_create_tag("python")
    assoc = services.AssociationService(session)
    assoc.add_tag(keesun, tag)
    assoc.add_tag(keesun, tag)
    assert [t.title for t in keesun.tags] == ["python"]
    assert _reload(keesun.id)[0] == ["python"]


def test_remove_absent_tag_is_noop(session, keesun):
    tags = services.TagService(session)
    assoc = services.AssociationService(session)
    assoc.add_tag(keesun, tags.resolve_or_create_tag("kept"))
    assoc.remove_tag(keesun, tags.resolve_or_create_tag("never-added"))
    assert _reload(keesun.id)[0] == ["kept"]


def test_membership_is_by_title(session, keesun):
    tag = services.TagService(session).resolve_or_create_tag("spring")
    services.AssociationService(session).add_tag(keesun, tag)
    assert keesun.has_tag(models.Tag(title="spring"))
    assert not keesun.has_tag(models.Tag(title="summer"))


def test_add_zone_then_contains(session, keesun, test_zone):
    services.AssociationService(session).add_zone(keesun, test_zone)
    with Session(engine) as s:
        account = repositories.AccountRepository(s).get(keesun.id)
        zone = repositories.ZoneRepository(s).get_by_city_and_province("test", "테스트주")
        assert account.has_zone(zone)
        assert zone in account.zones


def test_zone_add_and_remove_are_idempotent(session, keesun, test_zone):
    assoc = services.AssociationService(session)
    assoc.add_zone(keesun, test_zone)
    assoc.add_zone(keesun, test_zone)
    assert _reload(keesun.id)[1] == ["test(테스트시)/테스트주"]
    assoc.remove_zone(keesun, test_zone)
    assoc.remove_zone(keesun, test_zone)
    assert _reload(keesun.id)[1] == []


def test_remove_zone_matches_natural_key(session, keesun, test_zone):
    assoc = services.AssociationService(session)
    assoc.add_zone(keesun, test_zone)
    # display-only name differs; city and province decide membership
    assoc.remove_zone(keesun, models.Zone(city="test", local_name_of_city="other", province="테스트주"))
    assert _reload(keesun.id)[1] == []


def test_bare_tag_add_twice_then_remove(session, keesun):
    assoc = services.AssociationService(session)
    assoc.add_tag(keesun, models.Tag(title="newTag"))
    assoc.add_tag(keesun, models.Tag(title="newTag"))
    assert _reload(keesun.id)[0] == ["newTag"]
    assert len(services.TagService(session).whitelist()) == 1

    assoc.remove_tag(keesun, models.Tag(title="newTag"))
    assert _reload(keesun.id)[0] == []
