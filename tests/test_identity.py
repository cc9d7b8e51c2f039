# -*- encoding: utf-8 -*-
"""
Tests for SoftwareIdentity: lazy tag creation, typed accessors, the
set-once Meta rule, and Entity/Link append logs.
"""

import pytest

from swidtag import iso19770_2 as iso
from swidtag.elements import Entity, Link, SoftwareMetadata
from swidtag.exceptions import InvalidAttributeError, InvalidMetadataMutation, SwidTagError
from swidtag.identity import SoftwareIdentity


@pytest.fixture
def sid():
    identity = SoftwareIdentity(provider_name="nuget", source="https://api.nuget.org/v3/index.json")
    identity.name = "jquery"
    identity.version = "3.7.1"
    identity.version_scheme = "multipartnumeric"
    return identity


# ---------------------------------------------------------------------------
# Lazy tag creation
# ---------------------------------------------------------------------------


class TestLazyTag:

    def test_fresh_identity_has_no_tag(self):
        identity = SoftwareIdentity()
        assert not identity.has_swid_tag

    def test_reads_do_not_create_tag(self):
        identity = SoftwareIdentity()
        assert identity.name is None
        assert identity.version is None
        assert identity.version_scheme is None
        assert identity.tag_version is None
        assert identity.tag_id is None
        assert identity.is_patch is None
        assert identity.is_supplemental is None
        assert identity.applies_to_media is None
        assert identity.summary is None
        assert identity["summary"] == []
        assert list(identity.meta) == []
        assert list(identity.entities) == []
        assert len(identity.links) == 0
        assert not identity.has_swid_tag

    def test_first_write_creates_tag(self):
        identity = SoftwareIdentity()
        identity.name = "zlib"
        assert identity.has_swid_tag
        assert identity.swid.getroot().tag == iso.SOFTWARE_IDENTITY

    def test_swid_access_creates_empty_document(self):
        identity = SoftwareIdentity()
        root = identity.swid.getroot()
        assert root.tag == iso.SOFTWARE_IDENTITY
        assert len(root) == 0
        assert root.attrib == {}


# ---------------------------------------------------------------------------
# Root attributes
# ---------------------------------------------------------------------------


class TestRootAttributes:

    def test_round_trip_through_tag(self, sid):
        sid.tag_version = "2"
        sid.tag_id = "jquery-3.7.1"
        sid.applies_to_media = "(OS:windows)"
        root = sid.swid.getroot()
        assert root.get("name") == "jquery"
        assert root.get("version") == "3.7.1"
        assert root.get("versionScheme") == "multipartnumeric"
        assert root.get("tagVersion") == "2"
        assert root.get("tagId") == "jquery-3.7.1"
        assert root.get("media") == "(OS:windows)"
        assert sid.tag_id == "jquery-3.7.1"

    def test_overwrite_root_attribute(self, sid):
        sid.version = "4.0.0"
        assert sid.version == "4.0.0"

    def test_none_removes_attribute(self, sid):
        sid.version_scheme = None
        assert sid.version_scheme is None
        assert "versionScheme" not in sid.swid.getroot().attrib

    def test_process_local_fields_stay_out_of_tag(self, sid):
        sid.status = "Installed"
        sid.search_key = "jquery"
        sid.full_path = "/tmp/jquery.nupkg"
        sid.package_filename = "jquery.nupkg"
        sid.from_trusted_source = True
        sid.fast_package_reference = ("nuget", "jquery", "3.7.1")
        assert sid.provider_name == "nuget"
        assert sid.from_trusted_source is True
        assert set(sid.swid.getroot().attrib) == {"name", "version", "versionScheme"}

    def test_defaults(self):
        identity = SoftwareIdentity()
        assert identity.from_trusted_source is False
        assert identity.fast_package_reference is None


class TestTriStateFlags:

    def test_absent_is_none(self, sid):
        assert sid.is_patch is None
        assert sid.is_supplemental is None

    def test_write_true_and_false(self, sid):
        sid.is_patch = True
        sid.is_supplemental = False
        assert sid.swid.getroot().get("patch") == "true"
        assert sid.swid.getroot().get("supplemental") == "false"
        assert sid.is_patch is True
        assert sid.is_supplemental is False

    def test_write_none_clears(self, sid):
        sid.is_patch = True
        sid.is_patch = None
        assert sid.is_patch is None
        assert "patch" not in sid.swid.getroot().attrib

    @pytest.mark.parametrize("text,expected", [
        ("true", True),
        ("True", True),
        ("TRUE", True),
        (" true ", True),
        ("1", True),
        ("false", False),
        ("False", False),
        ("0", False),
        ("yes", False),
        ("", False),
    ])
    def test_parse_rule(self, sid, text, expected):
        sid.swid.getroot().set("patch", text)
        assert sid.is_patch is expected


# ---------------------------------------------------------------------------
# Meta and the set-once rule
# ---------------------------------------------------------------------------


class TestMeta:

    def test_summary_creates_first_meta(self, sid):
        sid.summary = "jQuery JavaScript library"
        assert sid.summary == "jQuery JavaScript library"
        metas = list(sid.meta)
        assert len(metas) == 1
        assert metas[0]["summary"] == "jQuery JavaScript library"

    def test_set_once_rejects_different_value(self, sid):
        sid.set_meta("description", "first")
        with pytest.raises(InvalidMetadataMutation) as excinfo:
            sid.set_meta("description", "second")
        assert excinfo.value.key == "description"
        assert excinfo.value.existing_values == ["first"]
        assert excinfo.value.value == "second"
        assert sid["description"] == ["first"]

    def test_set_once_same_value_is_noop(self, sid):
        sid.summary = "same"
        sid.summary = "same"
        assert sid.summary == "same"
        assert sid["summary"] == ["same"]
        assert len(sid.meta) == 1

    def test_mutation_error_is_swidtag_error(self, sid):
        sid.summary = "a"
        with pytest.raises(SwidTagError):
            sid.summary = "b"

    def test_set_once_spans_all_meta_elements(self, sid):
        sid.set_meta("colloquialVersion", "2024")
        sid.add_meta(product="jQuery")
        with pytest.raises(InvalidMetadataMutation):
            sid.set_meta("product", "Other")

    def test_repeating_value_from_later_meta_leaves_tree_unchanged(self, sid):
        sid.set_meta("edition", "core")
        sid.add_meta(product="jQuery")
        before = sid.swid_tag_text
        sid.set_meta("product", "jQuery")
        assert sid["product"] == ["jQuery"]
        assert sid.meta.first().to_dict() == {"edition": "core"}
        assert sid.swid_tag_text == before

    def test_repeating_value_does_not_create_tree_changes(self, sid):
        sid.summary = "stable"
        before = sid.swid_tag_text
        sid.summary = "stable"
        assert sid.swid_tag_text == before

    def test_empty_value_does_not_lock_key(self, sid):
        sid.set_meta("revision", "")
        sid.set_meta("revision", "7")
        assert sid["revision"] == ["7"]

    def test_summary_reads_first_meta_with_summary(self, sid):
        sid.set_meta("edition", "core")
        second = sid.add_meta(summary="from second meta")
        assert sid.summary == "from second meta"
        assert second.summary == "from second meta"

    def test_empty_summary_counts_as_present(self, sid):
        sid.summary = ""
        sid.add_meta(summary="later")
        assert sid.summary == ""
        assert sid["summary"] == ["", "later"]

    def test_distinct_keys_are_independent(self, sid):
        sid.set_meta("a", "1")
        sid.set_meta("b", "2")
        meta = sid.meta.first()
        assert meta.to_dict() == {"a": "1", "b": "2"}

    def test_add_meta_rejects_contradiction(self, sid):
        sid.summary = "one"
        with pytest.raises(InvalidMetadataMutation):
            sid.add_meta(summary="two")
        assert len(sid.meta) == 1

    def test_add_meta_returns_view(self, sid):
        meta = sid.add_meta(entitlementKey="abc", ignored=None)
        assert isinstance(meta, SoftwareMetadata)
        assert meta.keys() == ["entitlementKey"]
        assert "ignored" not in meta


# ---------------------------------------------------------------------------
# Entities and links
# ---------------------------------------------------------------------------


class TestEntities:

    def test_add_entity(self, sid):
        entity = sid.add_entity("OpenJS Foundation", "openjsf.org", "softwareCreator", thumbprint="abc123")
        assert isinstance(entity, Entity)
        assert entity.name == "OpenJS Foundation"
        assert entity.regid == "openjsf.org"
        assert entity.role == "softwareCreator"
        assert entity.thumbprint == "abc123"

    def test_thumbprint_optional(self, sid):
        entity = sid.add_entity("OpenJS Foundation", "openjsf.org", "tagCreator")
        assert entity.thumbprint is None
        assert "thumbprint" not in entity.element.attrib

    def test_entities_are_append_only_log(self, sid):
        sid.add_entity("A", "a.example", "tagCreator")
        sid.add_entity("A", "a.example", "tagCreator")
        assert len(sid.entities) == 2

    def test_document_order(self, sid):
        for name in ["first", "second", "third"]:
            sid.add_entity(name, f"{name}.example", "distributor")
        assert [e.name for e in sid.entities] == ["first", "second", "third"]


class TestLinks:

    def test_add_link(self, sid):
        link = sid.add_link("https://code.jquery.com/jquery-3.7.1.js", "component",
                            media_type="text/javascript", ownership="shared", use="required",
                            applies_to_media="(OS:any)", artifact="jquery.js")
        assert isinstance(link, Link)
        assert link.href == "https://code.jquery.com/jquery-3.7.1.js"
        assert link.relationship == "component"
        assert link.media_type == "text/javascript"
        assert link.ownership == "shared"
        assert link.use == "required"
        assert link.applies_to_media == "(OS:any)"
        assert link.artifact == "jquery.js"

    def test_link_uses_iso_attribute_names(self, sid):
        link = sid.add_link("swid:other-tag", "requires", media_type="application/swid-tag+xml")
        assert link.element.attrib == {
            "href": "swid:other-tag",
            "rel": "requires",
            "type": "application/swid-tag+xml",
        }

    def test_links_and_entities_are_separate(self, sid):
        sid.add_entity("A", "a.example", "tagCreator")
        sid.add_link("https://example.com", "license")
        sid.summary = "x"
        assert len(sid.entities) == 1
        assert len(sid.links) == 1
        assert len(sid.meta) == 1


# ---------------------------------------------------------------------------
# Live views
# ---------------------------------------------------------------------------


class TestLiveViews:

    def test_collection_sees_later_additions(self, sid):
        links = sid.links
        assert len(links) == 0
        sid.add_link("https://example.com/a", "see-also")
        assert [l.href for l in links] == ["https://example.com/a"]

    def test_collection_is_restartable(self, sid):
        sid.add_entity("A", "a.example", "tagCreator")
        entities = sid.entities
        assert [e.name for e in entities] == ["A"]
        assert [e.name for e in entities] == ["A"]

    def test_collection_on_fresh_identity_sees_later_tag(self):
        identity = SoftwareIdentity()
        entities = identity.entities
        assert list(entities) == []
        identity.add_entity("A", "a.example", "tagCreator")
        assert len(entities) == 1

    def test_projection_writes_through(self, sid):
        sid.add_entity("Old Name", "a.example", "tagCreator")
        entity = sid.entities[0]
        entity.name = "New Name"
        assert sid.entities[0].name == "New Name"

    def test_meta_view_write_bypasses_set_once(self, sid):
        sid.summary = "original"
        sid.meta.first().set("summary", "edited")
        assert sid.summary == "edited"

    def test_views_compare_by_backing_element(self, sid):
        entity = sid.add_entity("A", "a.example", "tagCreator")
        assert sid.entities[0] == entity
        assert sid.entities[0] is not entity

    def test_identities_do_not_share_trees(self):
        first = SoftwareIdentity()
        second = SoftwareIdentity()
        first.summary = "one"
        second.summary = "two"
        assert first.summary == "one"
        assert second.summary == "two"


class TestFromTag:

    def test_wraps_existing_tree(self):
        tree = iso.new_document()
        tree.getroot().set("name", "wrapped")
        identity = SoftwareIdentity.from_tag(tree, provider_name="msi")
        assert identity.has_swid_tag
        assert identity.name == "wrapped"
        assert identity.provider_name == "msi"
        assert identity.swid is tree


# ---------------------------------------------------------------------------
# Attributes XML cannot hold
# ---------------------------------------------------------------------------


class TestUnwritableAttributes:

    @pytest.mark.parametrize("key", ["display name", "1st", "", "a:b", "xmlns", "-lead", "tab\there"])
    def test_set_meta_rejects_invalid_key(self, sid, key):
        with pytest.raises(InvalidAttributeError) as excinfo:
            sid.set_meta(key, "v")
        assert excinfo.value.name == key
        assert len(sid.meta) == 0

    @pytest.mark.parametrize("value", ["bell\x07", "nul\x00", "esc\x1b[0m", "\ufffe"])
    def test_set_meta_rejects_invalid_value(self, sid, value):
        with pytest.raises(InvalidAttributeError):
            sid.summary = value
        assert sid.summary is None
        assert len(sid.meta) == 0

    def test_error_is_swidtag_error(self, sid):
        with pytest.raises(SwidTagError):
            sid.set_meta("display name", "v")

    def test_add_meta_rejects_before_appending(self, sid):
        with pytest.raises(InvalidAttributeError):
            sid.add_meta(product="ok", summary="bad\x0c")
        assert len(sid.meta) == 0

    def test_meta_view_set_rejects(self, sid):
        sid.summary = "fine"
        meta = sid.meta.first()
        with pytest.raises(InvalidAttributeError):
            meta.set("bad key", "v")
        with pytest.raises(InvalidAttributeError):
            meta.set("note", "\x01")
        assert meta.to_dict() == {"summary": "fine"}

    def test_root_and_child_setters_reject(self, sid):
        with pytest.raises(InvalidAttributeError):
            sid.name = "zero\x00width"
        with pytest.raises(InvalidAttributeError):
            sid.add_entity("Example", "example.com", "tagCreator", thumbprint="\x02")
        with pytest.raises(InvalidAttributeError):
            sid.add_link("https://example.com", "license", artifact="\x03")
        assert sid.name == "jquery"
        assert len(sid.entities) == 0
        assert len(sid.links) == 0

    @pytest.mark.parametrize("key", ["_private", "x-vendor.field", "dc.title2", "édition"])
    def test_accepts_valid_names(self, sid, key):
        sid.set_meta(key, "v")
        assert sid[key] == ["v"]
