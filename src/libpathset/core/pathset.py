"""
PathSet: OS-specific search templates for native libraries.

A PathSet holds two independent mappings of { os_pattern: templates }:

* paths: directory templates, e.g. "/usr/lib/"
* files: filename templates, e.g. "lib[NAME].so"

os_pattern is a regular expression matched against the running operating
system's identifier ("linux", "darwin", "windows", ...). The string [NAME]
in a template is replaced with a library name when searching, so
"/usr/lib/" + "lib[NAME].so" becomes e.g. "/usr/lib/libSDL_ttf.so".

Use append/prepend/replace/remove/delete to modify the templates in place,
or appended/prepended/replaced/removed/deleted to get a modified copy, and
find to look for files with a matching name.
"""

import re
from collections.abc import Mapping
from types import MappingProxyType

from . import resolver
from .errors import InvalidPartError
from .merge import (
    PARTS,
    FromRegistry,
    MergePolicy,
    TemplateMap,
    apply,
    as_pattern,
    as_templates,
    classify,
    delete_keys,
    merge_into,
    normalize,
)


def _build(templates: Mapping | None) -> TemplateMap:
    """Copy a caller mapping, compiling string keys and dropping empty lists."""
    result: TemplateMap = {}
    for key, value in (templates or {}).items():
        values = as_templates(value)
        if values:
            result[as_pattern(key)] = values
    return result


def _snapshot(templates: TemplateMap) -> Mapping[re.Pattern, list[str]]:
    """Read-only mapping whose lists are copies, so callers cannot empty ours."""
    return MappingProxyType({pattern: list(values) for pattern, values in templates.items()})


class PathSet:
    """
    Pattern-keyed directory and filename templates.

    Example:

        ps = PathSet({"linux|bsd": ["/usr/local/lib/", "/usr/lib/"]},
                     {"linux|bsd": ["lib[NAME].so"]})

        ps.find("SDL")
        ps.find("foo", "foo_alt_name")
    """

    def __init__(self, paths: Mapping | None = None, files: Mapping | None = None):
        """
        Initialize a path set.

        Args:
            paths: Mapping of OS pattern (str or re.Pattern) to directory templates
            files: Mapping of OS pattern (str or re.Pattern) to filename templates
        """
        self._paths = _build(paths)
        self._files = _build(files)

    @property
    def paths(self) -> Mapping[re.Pattern, list[str]]:
        """Read-only snapshot of the directory templates."""
        return _snapshot(self._paths)

    @property
    def files(self) -> Mapping[re.Pattern, list[str]]:
        """Read-only snapshot of the filename templates."""
        return _snapshot(self._files)

    def clone(self) -> "PathSet":
        """Return a deep copy; no template list is shared with the original."""
        other = self.__class__.__new__(self.__class__)
        other._paths = {pattern: list(values) for pattern, values in self._paths.items()}
        other._files = {pattern: list(values) for pattern, values in self._files.items()}
        return other

    __copy__ = clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathSet):
            return NotImplemented
        return self._paths == other._paths and self._files == other._files

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(paths={self._paths!r}, files={self._files!r})"

    # -- generic merges -----------------------------------------------------

    def merge(self, policy: MergePolicy | str, *changes) -> "PathSet":
        """
        Merge each change into this path set in place, left to right.

        Another PathSet contributes its paths to our paths and its files to
        our files. Any other change (mapping, list, single template) is
        applied to our paths only.

        Args:
            policy: MergePolicy or its value ("append", "prepend", ...)
            *changes: Mappings, lists, single templates, or PathSets

        Returns:
            self, for chaining
        """
        policy = MergePolicy(policy)
        for change in changes:
            change = classify(change)
            if isinstance(change, FromRegistry):
                apply(self._paths, normalize(change, self._paths, "paths"), policy)
                apply(self._files, normalize(change, self._files, "files"), policy)
            else:
                merge_into(self._paths, change, policy)
        return self

    def merge_part(self, part: str, policy: MergePolicy | str, *changes) -> "PathSet":
        """
        Merge each change into only our paths or only our files, in place.

        When a change is another PathSet, only its matching part is used.

        Args:
            part: "paths" or "files"
            policy: MergePolicy or its value
            *changes: Mappings, lists, single templates, or PathSets

        Returns:
            self, for chaining

        Raises:
            InvalidPartError: If part is not "paths" or "files"
        """
        if part not in PARTS:
            raise InvalidPartError(
                f"Invalid PathSet part {part!r} (expected 'paths' or 'files')"
            )
        policy = MergePolicy(policy)
        ours = self._paths if part == "paths" else self._files
        for change in changes:
            merge_into(ours, change, policy, part)
        return self

    # -- append -------------------------------------------------------------

    def append(self, *changes) -> "PathSet":
        """
        Append the new templates after the current ones, in place.

        Example:

            ps = PathSet({"a": ["liba"], "b": ["libb"]})
            ps.append({"a": ["newliba"], "c": ["libc"]})

            ps.paths
            # => {re.compile('a'): ['liba', 'newliba'],   # added in back
            #     re.compile('b'): ['libb'],              # not affected
            #     re.compile('c'): ['libc']}              # added
        """
        return self.merge(MergePolicy.APPEND, *changes)

    def appended(self, *changes) -> "PathSet":
        """Like append, but returns a modified copy."""
        return self.clone().append(*changes)

    def append_paths(self, *changes) -> "PathSet":
        """Like append, but only affects paths."""
        return self.merge_part("paths", MergePolicy.APPEND, *changes)

    def appended_paths(self, *changes) -> "PathSet":
        return self.clone().append_paths(*changes)

    def append_files(self, *changes) -> "PathSet":
        """Like append, but only affects files."""
        return self.merge_part("files", MergePolicy.APPEND, *changes)

    def appended_files(self, *changes) -> "PathSet":
        return self.clone().append_files(*changes)

    # -- prepend ------------------------------------------------------------

    def prepend(self, *changes) -> "PathSet":
        """
        Prepend the new templates before the current ones, in place.

        Example:

            ps = PathSet({"a": ["liba"], "b": ["libb"]})
            ps.prepend({"a": ["newliba"], "c": ["libc"]})

            ps.paths
            # => {re.compile('a'): ['newliba', 'liba'],   # added in front
            #     re.compile('b'): ['libb'],              # not affected
            #     re.compile('c'): ['libc']}              # added
        """
        return self.merge(MergePolicy.PREPEND, *changes)

    def prepended(self, *changes) -> "PathSet":
        """Like prepend, but returns a modified copy."""
        return self.clone().prepend(*changes)

    def prepend_paths(self, *changes) -> "PathSet":
        """Like prepend, but only affects paths."""
        return self.merge_part("paths", MergePolicy.PREPEND, *changes)

    def prepended_paths(self, *changes) -> "PathSet":
        return self.clone().prepend_paths(*changes)

    def prepend_files(self, *changes) -> "PathSet":
        """Like prepend, but only affects files."""
        return self.merge_part("files", MergePolicy.PREPEND, *changes)

    def prepended_files(self, *changes) -> "PathSet":
        return self.clone().prepend_files(*changes)

    # -- replace ------------------------------------------------------------

    def replace(self, *changes) -> "PathSet":
        """
        Discard the current templates of each given pattern in favor of the
        new ones, in place. Patterns not mentioned keep their templates.
        """
        return self.merge(MergePolicy.REPLACE, *changes)

    def replaced(self, *changes) -> "PathSet":
        """Like replace, but returns a modified copy."""
        return self.clone().replace(*changes)

    def replace_paths(self, *changes) -> "PathSet":
        """Like replace, but only affects paths."""
        return self.merge_part("paths", MergePolicy.REPLACE, *changes)

    def replaced_paths(self, *changes) -> "PathSet":
        return self.clone().replace_paths(*changes)

    def replace_files(self, *changes) -> "PathSet":
        """Like replace, but only affects files."""
        return self.merge_part("files", MergePolicy.REPLACE, *changes)

    def replaced_files(self, *changes) -> "PathSet":
        return self.clone().replace_files(*changes)

    # -- remove -------------------------------------------------------------

    def remove(self, *changes) -> "PathSet":
        """
        Remove the given templates, in place. Other templates of the same
        pattern are kept; patterns left with no templates are pruned.

        Example:

            ps = PathSet({"a": ["liba", "badliba"], "b": ["libb"]})
            ps.remove({"a": ["badliba"], "b": ["libb"], "c": ["libc"]})

            ps.paths
            # => {re.compile('a'): ['liba']}
            # "b" lost all its templates; "c" never had any.
        """
        return self.merge(MergePolicy.REMOVE, *changes)

    def removed(self, *changes) -> "PathSet":
        """Like remove, but returns a modified copy."""
        return self.clone().remove(*changes)

    def remove_paths(self, *changes) -> "PathSet":
        """Like remove, but only affects paths."""
        return self.merge_part("paths", MergePolicy.REMOVE, *changes)

    def removed_paths(self, *changes) -> "PathSet":
        return self.clone().remove_paths(*changes)

    def remove_files(self, *changes) -> "PathSet":
        """Like remove, but only affects files."""
        return self.merge_part("files", MergePolicy.REMOVE, *changes)

    def removed_files(self, *changes) -> "PathSet":
        return self.clone().remove_files(*changes)

    # -- delete -------------------------------------------------------------

    def delete(self, *patterns: str | re.Pattern) -> "PathSet":
        """
        Remove all paths and files for the given patterns, in place.
        Patterns that are not present are ignored.
        """
        delete_keys(self._paths, patterns)
        delete_keys(self._files, patterns)
        return self

    def deleted(self, *patterns: str | re.Pattern) -> "PathSet":
        """Like delete, but returns a modified copy."""
        return self.clone().delete(*patterns)

    def delete_paths(self, *patterns: str | re.Pattern) -> "PathSet":
        """Like delete, but only affects paths."""
        delete_keys(self._paths, patterns)
        return self

    def deleted_paths(self, *patterns: str | re.Pattern) -> "PathSet":
        return self.clone().delete_paths(*patterns)

    def delete_files(self, *patterns: str | re.Pattern) -> "PathSet":
        """Like delete, but only affects files."""
        delete_keys(self._files, patterns)
        return self

    def deleted_files(self, *patterns: str | re.Pattern) -> "PathSet":
        return self.clone().delete_files(*patterns)

    # -- operators ----------------------------------------------------------

    def __add__(self, other) -> "PathSet":
        return self.appended(other)

    def __iadd__(self, other) -> "PathSet":
        return self.append(other)

    def __sub__(self, other) -> "PathSet":
        return self.removed(other)

    def __isub__(self, other) -> "PathSet":
        return self.remove(other)

    # -- searching ----------------------------------------------------------

    def candidates(self, *names: str, os_name: str | None = None) -> list[str]:
        """Every expanded path that find would probe, existing or not."""
        return resolver.candidates(self, *names, os_name=os_name)

    def find(self, *names: str, os_name: str | None = None) -> list[str]:
        """
        Find files matching the templates for the running OS.

        Args:
            *names: Strings to try substituting for [NAME] in the templates
            os_name: OS identifier to match patterns against. Defaults to
                     the running operating system.

        Returns:
            Absolute paths of the existing files, or [] if none exist

        Raises:
            UnsupportedPlatformError: If the OS matched none of the patterns
        """
        return resolver.find(self, *names, os_name=os_name)

    async def find_async(self, *names: str, os_name: str | None = None) -> list[str]:
        """Like find, but probes the filesystem concurrently."""
        return await resolver.find_async(self, *names, os_name=os_name)
