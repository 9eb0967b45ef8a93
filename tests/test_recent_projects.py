from annotrack.services.recent_projects import MAX_RECENT_PROJECTS, RecentProjects


def test_empty_by_default(recent):
    assert recent.paths == []


def test_add_moves_path_to_front_without_duplicates(recent):
    recent.add("/a.json")
    recent.add("/b.json")
    recent.add("/a.json")
    assert recent.paths == ["/a.json", "/b.json"]


def test_list_is_capped(recent):
    for index in range(MAX_RECENT_PROJECTS + 3):
        recent.add(f"/p{index}.json")
    assert len(recent.paths) == MAX_RECENT_PROJECTS
    assert recent.paths[0] == f"/p{MAX_RECENT_PROJECTS + 2}.json"


def test_persists_across_instances(settings):
    RecentProjects(settings).add("/only.json")
    settings.sync()
    assert RecentProjects(settings).paths == ["/only.json"]


def test_remove_and_clear(recent):
    recent.add("/a.json")
    recent.add("/b.json")
    recent.remove("/a.json")
    assert recent.paths == ["/b.json"]
    recent.clear()
    assert recent.paths == []
