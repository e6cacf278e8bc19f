"""Apply one action descriptor to the document store."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Mapping, Protocol, Sequence

from notionagent.blocks.languages import has_fence
from notionagent.blocks.models import BlockKind, TextBlock, payload_text
from notionagent.blocks.synthesizer import bookmark
from notionagent.blocks.validator import validate, validate_all
from notionagent.llm.format_agent import FormatAgent
from notionagent.parsing.descriptors import PLACEMENT_BELOW, Action, ActionDescriptor
from notionagent.store.errors import StoreError
from notionagent.store.models import Document
from notionagent.targeting.resolver import AmbiguousTarget, ResolvedTarget, TargetNotFound, TargetResolver
from notionagent.targeting.sections import Section, build_sections, classify_page_structure, locate


logger = logging.getLogger(__name__)

HELP_EXAMPLES = (
    "Try: 'Write \"Meeting notes for today\" in the Journal page'",
    "Try: 'Create a new page called Project Ideas'",
    "Try: 'Edit \"old text\" to \"new text\" in the Journal page'",
    "Try: 'Add buy milk as todo in the Tasks page'",
)

_DEFAULT_FORMAT_BY_PAGE_TYPE = {
    "task_list": BlockKind.TO_DO.value,
    "bullet_notes": BlockKind.BULLETED_LIST_ITEM.value,
}

_READ_PREFIXES = {
    BlockKind.HEADING_1.value: "# ",
    BlockKind.HEADING_2.value: "## ",
    BlockKind.HEADING_3.value: "### ",
    BlockKind.BULLETED_LIST_ITEM.value: "- ",
    BlockKind.NUMBERED_LIST_ITEM.value: "1. ",
    BlockKind.QUOTE.value: "> ",
}


class DocumentStore(Protocol):
    def search_by_title(self, query: str) -> list[Document]: ...

    def list_all(self) -> list[Document]: ...

    def get_children(self, document_id: str) -> list[dict[str, Any]]: ...

    def append_children(
        self,
        document_id: str,
        blocks: Sequence[Mapping[str, Any]],
        *,
        after: str | None = None,
    ) -> list[dict[str, Any]]: ...

    def update_block(self, block_id: str, content: str) -> dict[str, Any]: ...

    def delete_block(self, block_id: str) -> dict[str, Any]: ...

    def create_page(self, title: str, *, parent_id: str | None = None) -> Document: ...


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    success: bool
    message: str
    retryable: bool = False


def helpful_response(text: str) -> str:
    example = HELP_EXAMPLES[len(text) % len(HELP_EXAMPLES)]
    return f'I couldn\'t determine what action to take with "{text}". {example}'


def find_block(blocks: Sequence[Mapping[str, Any]], needle: str) -> Mapping[str, Any] | None:
    """First block whose plain text contains `needle`, case-insensitively."""
    wanted = needle.strip().lower()
    if not wanted:
        return None
    for block in blocks:
        if wanted in payload_text(block).lower():
            return block
    return None


def _portable_copy(block: Mapping[str, Any]) -> dict[str, Any]:
    block_type = str(block.get("type") or BlockKind.PARAGRAPH.value)
    return validate({"object": "block", "type": block_type, block_type: block.get(block_type) or {}})


def _read_line(block: Mapping[str, Any]) -> str:
    text = payload_text(block)
    block_type = block.get("type")
    if block_type == BlockKind.TO_DO.value:
        checked = bool((block.get(BlockKind.TO_DO.value) or {}).get("checked"))
        return f"[{'x' if checked else ' '}] {text}"
    if block_type == BlockKind.DIVIDER.value:
        return "---"
    return f"{_READ_PREFIXES.get(str(block_type), '')}{text}"


class Executor:
    """Resolve, locate, synthesize, validate and apply a single descriptor."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        resolver: TargetResolver | None = None,
        format_agent: FormatAgent | None = None,
    ) -> None:
        self._store = store
        self._resolver = resolver or TargetResolver(store)
        self._format_agent = format_agent or FormatAgent()

    def describe(self) -> dict[str, Any]:
        return {
            "store": type(self._store).__name__,
            "formatAgent": "completion" if self._format_agent.uses_completion else "rules",
        }

    def execute(self, descriptor: ActionDescriptor) -> ExecutionResult:
        handlers = {
            Action.WRITE: self._write,
            Action.EDIT: self._edit,
            Action.DELETE: self._delete,
            Action.MOVE: self._move,
            Action.READ: self._read,
            Action.CREATE: self._create,
        }
        handler = handlers.get(descriptor.action)
        if handler is None:
            return ExecutionResult(success=False, message=helpful_response(descriptor.content or ""))
        return handler(descriptor)

    def _resolve(self, query: str | None) -> ResolvedTarget | ExecutionResult:
        if not query:
            return ExecutionResult(success=False, message="Which page should I use? Please name the page.")
        resolution = self._resolver.resolve(query)
        if isinstance(resolution, (TargetNotFound, AmbiguousTarget)):
            return ExecutionResult(success=False, message=resolution.message)
        return resolution

    def _blocks_for(self, descriptor: ActionDescriptor, format_type: str | None) -> list[dict[str, Any]]:
        if descriptor.is_url and descriptor.content:
            blocks: list[Any] = [bookmark(descriptor.content)]
            if descriptor.comment_text:
                blocks.append(TextBlock(kind=BlockKind.PARAGRAPH, text=descriptor.comment_text))
            return validate_all(blocks)
        return self._format_agent.format(descriptor.content or "", format_type, language=descriptor.code_language)

    def _write(self, descriptor: ActionDescriptor) -> ExecutionResult:
        target = self._resolve(descriptor.primary_target)
        if isinstance(target, ExecutionResult):
            return target

        content = descriptor.content or ""
        divider_only = BlockKind.DIVIDER.value == (descriptor.format_type or "")
        if not content.strip() and not divider_only:
            return ExecutionResult(
                success=False,
                message=f'No content specified to write to "{target.name}". Please specify what to write.',
            )

        children = self._store.get_children(target.id)
        sections = build_sections(children)
        section: Section | None = None
        if descriptor.section_target:
            section = locate(sections, descriptor.section_target)

        format_type = descriptor.format_type
        if format_type is None and not descriptor.section_target and not descriptor.is_url and not has_fence(content):
            structure = classify_page_structure(children, sections)
            format_type = _DEFAULT_FORMAT_BY_PAGE_TYPE.get(structure.page_type)

        blocks = self._blocks_for(descriptor, format_type)
        after = section.last_block_id if section is not None else None
        self._store.append_children(target.id, blocks, after=after)

        message = f'Successfully wrote "{content}" to "{target.name}"'
        if section is not None:
            relation = "below" if descriptor.placement == PLACEMENT_BELOW else "in"
            message += f' {relation} the "{section.title}" section'
        elif descriptor.section_target:
            message += f' (no section matching "{descriptor.section_target}", added at the end)'
        return ExecutionResult(success=True, message=self._with_confidence(message, descriptor, target))

    def _edit(self, descriptor: ActionDescriptor) -> ExecutionResult:
        target = self._resolve(descriptor.primary_target)
        if isinstance(target, ExecutionResult):
            return target
        old_content = descriptor.old_content or ""
        new_content = descriptor.new_content or ""
        if not old_content.strip():
            return ExecutionResult(
                success=False,
                message=f'No content specified to edit in "{target.name}". Please specify what to change.',
            )

        block = find_block(self._store.get_children(target.id), old_content)
        if block is None:
            return ExecutionResult(
                success=False,
                message=f'Could not find any content matching "{old_content}" on page "{target.name}"',
            )
        self._store.update_block(str(block.get("id")), new_content)
        message = f'Successfully edited "{old_content}" to "{new_content}" in "{target.name}"'
        return ExecutionResult(success=True, message=self._with_confidence(message, descriptor, target))

    def _delete(self, descriptor: ActionDescriptor) -> ExecutionResult:
        target = self._resolve(descriptor.primary_target)
        if isinstance(target, ExecutionResult):
            return target
        content = descriptor.content or ""
        if not content.strip():
            return ExecutionResult(
                success=False,
                message=f'No content specified to delete from "{target.name}". Please specify what content to delete.',
            )

        block = find_block(self._store.get_children(target.id), content)
        if block is None:
            return ExecutionResult(
                success=False,
                message=f'Could not find any content matching "{content}" on page "{target.name}"',
            )
        self._store.delete_block(str(block.get("id")))
        message = f'Successfully deleted "{content}" from "{target.name}"'
        return ExecutionResult(success=True, message=self._with_confidence(message, descriptor, target))

    def _move(self, descriptor: ActionDescriptor) -> ExecutionResult:
        source = self._resolve(descriptor.primary_target)
        if isinstance(source, ExecutionResult):
            return source
        if not descriptor.secondary_target:
            return ExecutionResult(success=False, message="Where should I move it? Please name the destination page.")
        destination = self._resolve(descriptor.secondary_target)
        if isinstance(destination, ExecutionResult):
            return ExecutionResult(
                success=False,
                message=f'Could not find target page "{descriptor.secondary_target}". Please check if this page exists.',
            )

        content = descriptor.content or ""
        block = find_block(self._store.get_children(source.id), content)
        if block is None:
            return ExecutionResult(
                success=False,
                message=f'Could not find any content matching "{content}" on page "{source.name}"',
            )
        copies = self._store.append_children(destination.id, [_portable_copy(block)])
        try:
            self._store.delete_block(str(block.get("id")))
        except StoreError:
            logger.warning("Removing the moved copy from %r after the source block could not be deleted", destination.name)
            for created in copies:
                if created.get("id"):
                    self._store.delete_block(str(created["id"]))
            raise
        return ExecutionResult(
            success=True,
            message=f'Successfully moved "{content}" from "{source.name}" to "{destination.name}"',
        )

    def _read(self, descriptor: ActionDescriptor) -> ExecutionResult:
        target = self._resolve(descriptor.primary_target)
        if isinstance(target, ExecutionResult):
            return target
        lines = [_read_line(block) for block in self._store.get_children(target.id)]
        lines = [line for line in lines if line.strip()]
        if not lines:
            return ExecutionResult(success=True, message=f'"{target.name}" is empty.')
        return ExecutionResult(success=True, message=f'Contents of "{target.name}":\n' + "\n".join(lines))

    def _create(self, descriptor: ActionDescriptor) -> ExecutionResult:
        title = (descriptor.primary_target or "").strip()
        if not title:
            return ExecutionResult(success=False, message="What should the new page be called?")

        parent_id: str | None = None
        parent_name: str | None = None
        if descriptor.secondary_target:
            parent = self._resolve(descriptor.secondary_target)
            if isinstance(parent, ExecutionResult):
                return ExecutionResult(
                    success=False,
                    message=f'Could not find parent page "{descriptor.secondary_target}" to create the new page in.',
                )
            parent_id, parent_name = parent.id, parent.name

        document = self._store.create_page(title, parent_id=parent_id)
        message = f'Successfully created page "{document.title}"'
        if parent_name is not None:
            message += f' in "{parent_name}"'
        return ExecutionResult(success=True, message=message)

    @staticmethod
    def _with_confidence(message: str, descriptor: ActionDescriptor, target: ResolvedTarget) -> str:
        if target.low_confidence:
            return f'{message} (closest match for "{descriptor.primary_target}")'
        return message
