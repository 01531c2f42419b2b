"""Base class for all records scrapers."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Any, Callable, Optional, Type
import asyncio
import json
import logging
import os
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from wells_scraper.configs.settings import app_config
from wells_scraper.scrapers.base.context import ScrapeContext
from wells_scraper.schemas.run_log import RunLog
from wells_scraper.storage.record_store import JsonRecordStore

ProgressCallback = Callable[[int, int, Optional[int]], None]


class RecordsBaseScraper(ABC, BaseModel):
    """Base class for records scrapers.

    A scraper drives one portal from its search form to the last result page
    and writes every row it sees to the record store of a
    :class:`ScrapeContext`.
    """

    _region: str = PrivateAttr(default="")
    _source: str = PrivateAttr(default="")
    _data_dir: Path = PrivateAttr(default_factory=lambda: Path(app_config.DATA_DIR))

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="allow")

    @property
    def region(self) -> str:
        return self._region

    @property
    def source(self) -> str:
        return self._source

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def set_data_dir(self, value: Path) -> None:
        self._data_dir = Path(value)

    def scrape(self, *args: Any, **kwargs: Any) -> RunLog:
        """Scrape the portal synchronously.

        Parameters
        ----------
        *args : Any
            Positional arguments forwarded to ``scrape_async``.
        **kwargs : Any
            Keyword arguments forwarded to ``scrape_async``.
        """
        try:
            return asyncio.run(self.scrape_async(*args, **kwargs))
        except RuntimeError as exc:
            if "asyncio.run() cannot be called from a running event loop" in str(exc):
                raise RuntimeError(
                    "scrape() cannot be called from an active event loop; "
                    "use `await scrape_async(...)` instead."
                ) from exc
            raise

    async def scrape_async(
        self,
        *args: Any,
        context: Optional[ScrapeContext] = None,
        progress_callback: Optional[ProgressCallback] = None,
        **kwargs: Any,
    ) -> RunLog:
        """Scrape the portal (Asynchronously).

        Parameters
        ----------
        context : Optional[ScrapeContext], default=None
            Collaborators to use. When omitted, the default context of the
            scraper is opened for the duration of the run and closed afterwards.
        progress_callback : Optional[Callable[[int, int, Optional[int]], None]], default=None
            Receives ``(success_inc, failed_inc, total_pages)`` after every page.
        """
        if context is not None:
            return await self.collect(context, *args, progress_callback=progress_callback, **kwargs)
        async with self.open_default_context() as default_context:
            return await self.collect(default_context, *args, progress_callback=progress_callback, **kwargs)

    @abstractmethod
    def open_default_context(self) -> AbstractAsyncContextManager:
        """Return an async context manager yielding the production ``ScrapeContext``."""

    @abstractmethod
    async def collect(
        self,
        context: ScrapeContext,
        *args: Any,
        progress_callback: Optional[ProgressCallback] = None,
        **kwargs: Any,
    ) -> RunLog:
        """Run the search and persist every result row."""

    # ------------------------
    # Input schema and adapter
    # ------------------------
    class DefaultInputs(BaseModel):
        """Default inputs for records scrapers.

        Parameters
        ----------
        headless : bool, default=True
            Run browser in headless mode.
        """

        headless: bool = Field(default=True, description="Do you want to run headless?")

    @classmethod
    def get_input_schema(cls) -> Type[BaseModel]:
        """Return the Pydantic model describing CLI inputs for this scraper.

        Returns
        -------
        Type[pydantic.BaseModel]
            A model class used to prompt for inputs. Override in scrapers to customize.
        """
        return RecordsBaseScraper.DefaultInputs

    def scrape_with_inputs(self, inputs: BaseModel, **kwargs: Any) -> RunLog:
        """Run the scraper using a validated inputs object.

        Parameters
        ----------
        inputs : BaseModel
            Instance of the model returned by ``get_input_schema``.
        **kwargs : Any
            Extra keyword arguments (e.g. ``progress_callback``).

        Returns
        -------
        RunLog
            Summary of the run.
        """
        payload = inputs.model_dump()
        payload.pop("headless", None)
        return self.scrape(**payload, **kwargs)

    def _result_output_dir(self) -> Path:
        """Return the output directory for run logs.

        Returns
        -------
        Path
            Directory ``<DATA_DIR>/runs/<region>/<source>``. The directory is
            created if it does not exist.
        """
        out_dir = self._data_dir / "runs" / self._region / self._source
        out_dir.mkdir(parents=True, exist_ok=True)
        return out_dir

    def _records_dir(self) -> Path:
        return self._data_dir / "records"

    def output_path_for(self, context: ScrapeContext, table_name: str) -> Optional[str]:
        """Return the directory holding ``table_name`` when the store is file based."""
        store = context.record_store
        if isinstance(store, JsonRecordStore):
            return str(store.root / table_name)
        return None

    def persist_result(self, result: RunLog) -> Optional[Path]:
        """Atomically persist the run log to a JSON file.

        Parameters
        ----------
        result : RunLog
            The run summary to serialize and persist.

        Returns
        -------
        Optional[Path]
            The path to the persisted run log, ``None`` if it could not be written.
        """
        try:
            out_dir = self._result_output_dir()
            stem = f"{result.start_date or 'all'}_{result.end_date or 'all'}"
            final_path = out_dir / f"{stem}.json"

            payload = json.dumps(result.model_dump(mode="json"), ensure_ascii=False, sort_keys=True, indent=2)

            tmp_path = out_dir / f".{stem}.{uuid4().hex}.tmp"
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, final_path)

            return final_path
        except Exception as e:
            # Best-effort persistence; the records themselves are already stored
            logging.exception("Failed to persist run log for %s/%s: %s", self._region, self._source, e)
            return None

    def process_progress_callback(
        self,
        progress_callback: Optional[ProgressCallback],
        success_inc: int,
        failed_inc: int,
        total: Optional[int] = None,
    ) -> None:
        """Process the progress callback."""
        if progress_callback is not None:
            try:
                progress_callback(success_inc, failed_inc, total)
            except Exception:
                logging.exception("Progress callback failed")
