from skyforge.filters import Filter
from skyforge.keys import global_key, regional_key, zonal_key


def test_equals_escapes_regex_characters():
    fl = Filter.equals("name", "my.network+1")
    assert str(fl) == '(name eq "my\\.network\\+1")'


def test_regexp_is_passed_through():
    assert str(Filter.regexp("name", "my-cluster-.*")) == '(name eq "my-cluster-.*")'


def test_predicates_are_anded():
    fl = Filter.equals("description", "tag") & Filter.regexp("network", ".*/net")
    assert len(fl.predicates) == 2
    assert str(fl) == '(description eq "tag") (network eq ".*/net")'


def test_quotes_cannot_break_out_of_the_value():
    fl = Filter.regexp("name", 'x") OR (name eq "y')
    assert str(fl) == '(name eq "x\\") OR (name eq \\"y")'


def test_keys_render_their_scope():
    assert str(global_key("net")) == "net"
    assert str(regional_key("sub", "us-west1")) == "regions/us-west1/sub"
    assert str(zonal_key("vm", "us-west1-a")) == "zones/us-west1-a/vm"
    assert global_key("net").scope == "global"
    assert regional_key("sub", "r").scope == "regional"
    assert zonal_key("vm", "z").scope == "zonal"
    # Keys are used as dict keys
    assert {global_key("net"): 1}[global_key("net")] == 1
