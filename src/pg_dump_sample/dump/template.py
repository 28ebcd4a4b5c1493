"""Variable substitution for manifest queries.

Manifest queries are templates: ``{{name}}`` is replaced by the value of
``name`` from the manifest's ``vars``.  Values are inserted as plain text,
with no SQL quoting, so a template has to supply its own quotes around
string literals (``WHERE day = '{{day}}'``).

Nothing but variable references is interpreted: ``{%`` and ``{#`` in a
query (array literals, LIKE patterns) pass through unchanged.

Rendering is strict: referencing a variable the manifest does not define
is an error, not an empty string.

Usage:
    from pg_dump_sample.dump.template import QueryTemplate

    renderer = QueryTemplate()
    renderer.render("SELECT * FROM {{t}} WHERE active", {"t": "users"})
    # 'SELECT * FROM users WHERE active'

    # Other delimiters, e.g. for queries that contain '{{' themselves
    renderer = QueryTemplate(variable_start="<%", variable_end="%>")
"""

import jinja2

from pg_dump_sample.exceptions import TemplateError


class QueryTemplate:
    """Render query templates with name-to-value substitution.

    Args:
        variable_start: Opening delimiter of a variable reference.
        variable_end: Closing delimiter of a variable reference.
    """

    def __init__(self, variable_start: str = "{{", variable_end: str = "}}") -> None:
        # Only variable references are template syntax. Block and comment
        # tags get delimiters that cannot appear in SQL text, so '{%' and
        # '{#' in literals render unchanged.
        self._env = jinja2.Environment(
            variable_start_string=variable_start,
            variable_end_string=variable_end,
            block_start_string="\x00{%",
            block_end_string="%}\x00",
            comment_start_string="\x00{#",
            comment_end_string="#}\x00",
            undefined=jinja2.StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )

    def render(
        self,
        template: str,
        variables: dict[str, str],
        table: str | None = None,
    ) -> str:
        """Substitute *variables* into *template*.

        Args:
            template: Query text containing variable references.
            variables: Variable values by name.
            table: Table the query belongs to, for error messages.

        Returns:
            The rendered query.

        Raises:
            TemplateError: On a syntax error or an undefined variable.
        """
        try:
            return self._env.from_string(template).render(variables)
        except jinja2.TemplateSyntaxError as e:
            raise TemplateError(
                f"syntax error on line {e.lineno}: {e.message}",
                table=table,
                phase="template",
            ) from e
        except jinja2.UndefinedError as e:
            raise TemplateError(e.message or str(e), table=table, phase="template") from e
