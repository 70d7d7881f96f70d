"""Controller base class.

Controllers group related actions. Register the class with the app and
refer to its actions as ``"Name@action"`` in the route table::

    class PostsController(Controller):
        def index(self, ctx):
            return self.view("posts.index", posts=Post.all(ctx.db))

        def show(self, ctx, post_id):
            post = Post.find(ctx.db, int(post_id))
            if post is None:
                raise NotFound()
            return self.view("posts.show", post=post)

    app.controller(PostsController)
    app.get("/posts/{id}", "PostsController@show")

A new instance is created for every dispatched request, so instance
attributes never leak between requests.
"""

from typing import Any

from wren.http.response import Redirect
from wren.views import View


class Controller:
    """Base class for controllers. Public methods become actions."""

    def view(self, name: str, /, **data: Any) -> View:
        """A ``View`` for dotted *name* with *data* as its context."""
        return View(name, **data)

    def redirect(self, url: str, status: int = 302) -> Redirect:
        return Redirect(url, status=status)

    def back(self, ctx: Any) -> Redirect:
        """Redirect to the previous page (see ``RequestContext.back``)."""
        return Redirect(ctx.back())
