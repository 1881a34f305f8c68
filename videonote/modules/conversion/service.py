"""Service layer sequencing one clip through the conversion pipeline.

States: validating -> fetching -> transcoding -> succeeded | failed.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from videonote.core.logging import log_error, log_info
from videonote.modules.conversion.errors import FetchFailedError, TranscodeFailedError
from videonote.modules.conversion.fetcher import RemoteFetcher
from videonote.modules.conversion.ffmpeg import Transcoder
from videonote.modules.conversion.limits import validate_limits
from videonote.modules.conversion.models import (
    ChatContext,
    ConversionResult,
    ConversionState,
    FailureKind,
    Limits,
)
from videonote.modules.conversion.notifier import Notifier
from videonote.modules.conversion.schemas import ConversionRequest
from videonote.modules.conversion.workspace import Workspace, workspace_scope

logger = logging.getLogger(__name__)


class ConversionPipeline:
    """State machine driving a single conversion.

    One instance per request. The processing notice goes out before any
    blocking work and is retracted exactly once before the outcome is
    reported. The workspace is only acquired after the download succeeded
    and is released on every exit path, cancellation included.
    """

    def __init__(
        self,
        request: ConversionRequest,
        chat: ChatContext,
        fetcher: RemoteFetcher,
        transcoder: Transcoder,
        notifier: Notifier,
        limits: Limits,
        work_dir: Union[str, Path],
    ):
        self.request = request
        self.chat = chat
        self.fetcher = fetcher
        self.transcoder = transcoder
        self.notifier = notifier
        self.limits = limits
        self.work_dir = work_dir

        self.state = ConversionState.VALIDATING
        self.failure: Optional[FailureKind] = None
        self.workspace: Optional[Workspace] = None
        self._notice_id: Optional[int] = None
        self._retracted = False

    async def run(self) -> ConversionResult:
        """Run the conversion to a terminal state.

        Returns:
            ConversionResult with the artifact or the failure kind

        Raises:
            asyncio.CancelledError: After cleanup, when cancelled mid-flight
        """
        request = self.request

        if not validate_limits(request.duration, request.file_size, self.limits):
            log_info(
                logger,
                "Video rejected by limits",
                file_id=request.file_id,
                duration=request.duration,
                file_size=request.file_size,
            )
            result = self._fail(FailureKind.TOO_LARGE, "declared duration or size over limit")
            await self.notifier.notify_too_large(self.chat)
            return result

        self._transition(ConversionState.FETCHING)

        try:
            self._notice_id = await self.notifier.notify_processing(self.chat)
            result = await self._convert()
        except asyncio.CancelledError:
            kind = self._failure_for_stage()
            self._fail(kind, "cancelled")
            log_info(logger, "Conversion cancelled", file_id=request.file_id, failure=kind.value)
            await self._retract()
            raise
        except Exception as e:
            kind = self._failure_for_stage()
            log_error(
                logger,
                "Unexpected error during conversion",
                exception=e,
                file_id=request.file_id,
                state=self.state.value,
            )
            result = self._fail(kind, f"{type(e).__name__}: {e}")

        await self._retract()

        if result.succeeded:
            delivered = await self.notifier.deliver_artifact(self.chat, result.artifact, result.side)
            if not delivered:
                await self.notifier.notify_error(self.chat)
        else:
            await self.notifier.notify_error(self.chat)

        return result

    async def _convert(self) -> ConversionResult:
        request = self.request

        try:
            data = await self.fetcher.fetch(request.file_id)
        except FetchFailedError as e:
            log_error(logger, "Error downloading video", exception=e, file_id=request.file_id)
            return self._fail(FailureKind.FETCH_FAILED, str(e))

        self._transition(ConversionState.TRANSCODING)

        try:
            async with workspace_scope(self.work_dir) as workspace:
                self.workspace = workspace
                workspace.write_input(data)
                artifact = await self.transcoder.transcode(
                    workspace.input_path,
                    workspace.output_path,
                    request.height,
                    request.width,
                )
        except TranscodeFailedError as e:
            log_error(logger, "Error cropping video", exception=e, file_id=request.file_id)
            return self._fail(FailureKind.TRANSCODE_FAILED, str(e))
        except OSError as e:
            log_error(logger, "Error staging video in workspace", exception=e, file_id=request.file_id)
            return self._fail(FailureKind.TRANSCODE_FAILED, str(e))

        self._transition(ConversionState.SUCCEEDED)
        log_info(
            logger,
            "Video note generated",
            file_id=request.file_id,
            side=request.side,
            artifact_size=len(artifact),
        )
        return ConversionResult(
            state=self.state,
            artifact=artifact,
            side=request.side,
        )

    async def _retract(self) -> None:
        if self._retracted or self._notice_id is None:
            return
        self._retracted = True
        await self.notifier.retract_notice(self.chat, self._notice_id)

    def _failure_for_stage(self) -> FailureKind:
        if self.state == ConversionState.FETCHING:
            return FailureKind.FETCH_FAILED
        return FailureKind.TRANSCODE_FAILED

    def _transition(self, state: ConversionState) -> None:
        logger.debug("Conversion %s: %s -> %s", self.request.file_id, self.state.value, state.value)
        self.state = state

    def _fail(self, kind: FailureKind, error: str) -> ConversionResult:
        self._transition(ConversionState.FAILED)
        self.failure = kind
        return ConversionResult(
            state=self.state,
            failure=kind,
            side=self.request.side,
            error=error,
        )


class ConversionService:
    """Service for converting clips into video notes.

    Holds the process-wide collaborators and limits; every call to
    ``convert`` runs its own independent pipeline.
    """

    def __init__(
        self,
        fetcher: RemoteFetcher,
        transcoder: Transcoder,
        notifier: Notifier,
        limits: Limits,
        work_dir: Union[str, Path],
    ):
        self.fetcher = fetcher
        self.transcoder = transcoder
        self.notifier = notifier
        self.limits = limits
        self.work_dir = work_dir

    def create_pipeline(self, request: ConversionRequest, chat: ChatContext) -> ConversionPipeline:
        return ConversionPipeline(
            request=request,
            chat=chat,
            fetcher=self.fetcher,
            transcoder=self.transcoder,
            notifier=self.notifier,
            limits=self.limits,
            work_dir=self.work_dir,
        )

    async def convert(self, request: ConversionRequest, chat: ChatContext) -> ConversionResult:
        """Convert one clip and report the outcome to the chat."""
        return await self.create_pipeline(request, chat).run()
