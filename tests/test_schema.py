from datetime import datetime

import pytest

from schemagen.attributes import ArrayKind, ReferenceKind
from schemagen.config import GenerateOptions, GeneratorConfig, ResolvedOptions, resolve_options
from schemagen.errors import AttributeSpecError, NamingError, UsageError
from schemagen.schema import build_schema, timestamp, validate_args

ATTRS = [
    "title:string",
    "views:integer",
    "user_id:references:users",
    "tags:array:string",
    "unique_int:integer:unique",
]


@pytest.mark.parametrize("module_name", ["Post", "Blog.Post", "Admin.Blog.PostDraft"])
@pytest.mark.parametrize("plural", ["posts", "blog_posts", "drafts2"])
def test_empty_attribute_list_builds(
    module_name: str, plural: str, options: ResolvedOptions, now: datetime
) -> None:
    model = build_schema(module_name, plural, [], options, now=now)
    assert model.attributes == ()
    assert model.associations == ()
    assert model.migration is True


def test_full_model(options: ResolvedOptions, now: datetime) -> None:
    model = build_schema("Blog.Post", "blog_posts", ATTRS, options, now=now)
    assert model.module_name == "Blog.Post"
    assert model.module == "app.blog.post"
    assert model.alias == "Post"
    assert model.singular == "post"
    assert model.table_name == "blog_posts"
    assert model.file_path == "app/blog/post.py"
    assert model.human_singular == "Post"
    assert model.human_plural == "Blog posts"
    assert [attr.name for attr in model.attributes] == [
        "title",
        "views",
        "user_id",
        "tags",
        "unique_int",
    ]
    assert model.attributes[3].kind == ArrayKind(element_type="string")
    assert model.uniques == ("unique_int",)
    assert model.timestamp == "20261018090503"
    assert model.migration_path == "migrations/versions/20261018090503_create_post.py"


def test_reference_contributes_one_association(options: ResolvedOptions, now: datetime) -> None:
    model = build_schema("Blog.Post", "blog_posts", ATTRS, options, now=now)
    assert len(model.associations) == 1
    assoc = model.associations[0]
    assert assoc.name == "user"
    assert assoc.key == "user_id"
    assert assoc.target_module == "Blog.User"
    assert assoc.target_class == "app.blog.user.User"
    assert assoc.target_table == "users"
    reference = model.attributes[2]
    assert reference.kind == ReferenceKind(target_table="users")


def test_indexes_follow_references_then_uniques(options: ResolvedOptions, now: datetime) -> None:
    model = build_schema("Blog.Post", "blog_posts", ATTRS + ["slug:unique"], options, now=now)
    assert [(index.name, index.unique) for index in model.indexes] == [
        ("blog_posts_user_id_index", False),
        ("blog_posts_unique_int_index", True),
        ("blog_posts_slug_index", True),
    ]


def test_plural_validation(options: ResolvedOptions, now: datetime) -> None:
    assert build_schema("Blog.Post", "blog_posts", [], options, now=now).plural == "blog_posts"
    for bad in ("BlogPosts", "blog-posts"):
        with pytest.raises(NamingError, match="snake_case"):
            build_schema("Blog.Post", bad, [], options, now=now)
    with pytest.raises(UsageError) as excinfo:
        build_schema("Blog.Post", "title:string", [], options, now=now)
    assert "blog_posts" in str(excinfo.value)
    assert "schemagen schema Blog.Post blog_posts title:string" in excinfo.value.usage


def test_module_name_must_be_capitalized(options: ResolvedOptions, now: datetime) -> None:
    with pytest.raises(NamingError, match="valid module name"):
        build_schema("blog.post", "blog_posts", [], options, now=now)


def test_table_override_keeps_derived_names(now: datetime) -> None:
    options = resolve_options(GeneratorConfig(), GenerateOptions(table="cms_posts"))
    model = build_schema("Blog.Post", "posts", ["user_id:references:users"], options, now=now)
    assert model.table_name == "cms_posts"
    assert model.plural == "posts"
    assert model.singular == "post"
    assert model.file_path == "app/blog/post.py"
    assert model.indexes[0].name == "cms_posts_user_id_index"


def test_migration_flag_overrides_default(now: datetime) -> None:
    config = GeneratorConfig(migration=True)
    forced_off = resolve_options(config, GenerateOptions(migration=False))
    assert build_schema("Post", "posts", [], forced_off, now=now).migration is False
    default = resolve_options(config, GenerateOptions())
    assert build_schema("Post", "posts", [], default, now=now).migration is True

    config_off = GeneratorConfig(migration=False)
    from_config = resolve_options(config_off, GenerateOptions())
    assert build_schema("Post", "posts", [], from_config, now=now).migration is False
    forced_on = resolve_options(config_off, GenerateOptions(migration=True))
    assert build_schema("Post", "posts", [], forced_on, now=now).migration is True


def test_binary_id_changes_reference_type_and_sample_id(now: datetime) -> None:
    options = resolve_options(GeneratorConfig(), GenerateOptions(binary_id=True))
    model = build_schema("Blog.Post", "blog_posts", ["user_id:references:users"], options, now=now)
    assert model.binary_id is True
    assert model.attributes[0].value_type == "binary_id"
    assert model.sample_id == "11111111-1111-1111-1111-111111111111"


def test_build_is_idempotent(options: ResolvedOptions) -> None:
    first = build_schema("Blog.Post", "blog_posts", ATTRS, options)
    second = build_schema("Blog.Post", "blog_posts", ATTRS, options)
    assert first.semantic_dump() == second.semantic_dump()
    assert "timestamp" not in first.semantic_dump()


def test_model_is_frozen(options: ResolvedOptions, now: datetime) -> None:
    model = build_schema("Post", "posts", [], options, now=now)
    with pytest.raises(ValueError):
        model.table_name = "other"  # type: ignore[misc]


def test_attribute_errors_propagate(options: ResolvedOptions, now: datetime) -> None:
    with pytest.raises(AttributeSpecError, match="tags:array"):
        build_schema("Post", "posts", ["tags:array"], options, now=now)


def test_validate_args() -> None:
    assert validate_args(["Blog.Post", "blog_posts", "title"]) == (
        "Blog.Post",
        "blog_posts",
        ["title"],
    )
    with pytest.raises(UsageError):
        validate_args(["Blog.Post"])
    with pytest.raises(UsageError):
        validate_args([])


def test_timestamp_is_fixed_width(now: datetime) -> None:
    stamp = timestamp(now)
    assert stamp == "20261018090503"
    assert len(timestamp()) == 14


def test_unique_reference_gets_a_single_unique_index(
    options: ResolvedOptions, now: datetime
) -> None:
    model = build_schema(
        "Blog.Post",
        "blog_posts",
        ["user_id:references:users:unique", "slug:unique"],
        options,
        now=now,
    )
    assert [(index.name, index.unique) for index in model.indexes] == [
        ("blog_posts_user_id_index", True),
        ("blog_posts_slug_index", True),
    ]
    names = [index.name for index in model.indexes]
    assert len(names) == len(set(names))


def test_plural_and_table_must_be_table_names(options: ResolvedOptions, now: datetime) -> None:
    with pytest.raises(NamingError, match="valid table name"):
        build_schema("Blog.Post", 'posts"', [], options, now=now)
    table_options = resolve_options(GeneratorConfig(), GenerateOptions(table='cms"posts'))
    with pytest.raises(NamingError, match="table name"):
        build_schema("Blog.Post", "posts", [], table_options, now=now)


def test_quoted_reference_target_is_rejected(options: ResolvedOptions, now: datetime) -> None:
    with pytest.raises(AttributeSpecError, match="not a valid table name"):
        build_schema("Blog.Post", "posts", ['user_id:references:us"ers'], options, now=now)
