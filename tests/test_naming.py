from schemagen import naming


def test_underscore() -> None:
    assert naming.underscore("Blog.Post") == "blog/post"
    assert naming.underscore("BlogPosts") == "blog_posts"
    assert naming.underscore("HTTPServer") == "http_server"
    assert naming.underscore("blog-posts") == "blog_posts"
    assert naming.underscore("blog_posts") == "blog_posts"


def test_camelize_and_humanize() -> None:
    assert naming.camelize("blog_post") == "BlogPost"
    assert naming.humanize("blog_posts") == "Blog posts"
    assert naming.humanize("user_id") == "User"


def test_pluralize() -> None:
    assert naming.pluralize("post") == "posts"
    assert naming.pluralize("category") == "categories"
    assert naming.pluralize("box") == "boxes"
    assert naming.pluralize("day") == "days"


def test_module_helpers() -> None:
    assert naming.is_module_name("Blog.Post")
    assert not naming.is_module_name("blog.Post")
    assert not naming.is_module_name("Blog.post")
    assert naming.module_alias("Blog.Post") == "Post"
    assert naming.module_singular("Blog.BlogPost") == "blog_post"
    assert naming.module_path("Blog.Post", "app") == "app.blog.post"
    assert naming.module_file_path("Blog.Post", "my_app.core") == "my_app/core/blog/post.py"
    assert naming.default_plural("Blog.Post") == "blog_posts"
    assert naming.sibling_module("Blog.Post", "User") == "Blog.User"


def test_is_table_name() -> None:
    assert naming.is_table_name("blog_posts")
    assert naming.is_table_name("_drafts2")
    assert not naming.is_table_name('posts"')
    assert not naming.is_table_name("public.posts")
    assert not naming.is_table_name("2posts")
    assert not naming.is_table_name("")
