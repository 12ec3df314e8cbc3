"""
Dataset processing pipeline

This module runs the full ingestion-validation-fusion sequence for one uploaded
dataset:

    read -> parse -> validate -> preprocess -> extract -> fuse -> predict
         -> explain -> report

Stages run one after another as coroutines on the caller's event loop. The
public entry point always resolves to a PipelineResult: validation failures
map to their user messages, and any exception raised by a later stage is
caught once here, logged, and reported as a generic processing error.
"""

import asyncio
import logging
import time
from typing import Dict, Optional

from .acquisition.sources import DatasetSource, parse_dataset, read_source
from .core.backend import ensure_initialized
from .core.config import PipelineConfig, MSG_READ_ERROR, validate_config
from .core.data_types import FusionStrategy, PipelineResult
from .core.errors import PipelineCancelled, PipelineError, ProcessingError
from .detection.explainer import Explainer
from .detection.predictor import HybridPredictor
from .fusion.engine import FusionEngine
from .processing.features import FeatureExtractor, default_extractors, extract_feature_set
from .processing.preprocessor import Preprocessor
from .reporting.metrics import MetricsReporter
from .validation.schema_validator import SchemaValidator


class CancellationToken:
    """Cooperative cancellation flag checked by the pipeline between stages"""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise PipelineCancelled("cancelled between stages")


class DatasetPipeline:
    """
    Sequential multimodal processing pipeline

    Components default to the standard implementations built from the config
    and may be replaced individually (e.g. a real feature extractor or a
    trained predictor). A pipeline instance holds no per-run state, so it can
    process any number of datasets one after another.
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 validator: Optional[SchemaValidator] = None,
                 preprocessor: Optional[Preprocessor] = None,
                 extractors: Optional[Dict[str, FeatureExtractor]] = None,
                 fusion_engine: Optional[FusionEngine] = None,
                 predictor: Optional[HybridPredictor] = None,
                 explainer: Optional[Explainer] = None,
                 reporter: Optional[MetricsReporter] = None):
        self.config = config or PipelineConfig()
        validate_config(self.config)

        self.validator = validator or SchemaValidator(self.config)
        self.preprocessor = preprocessor or Preprocessor(self.config)
        self.extractors = extractors or default_extractors(self.config)
        self.fusion_engine = fusion_engine or FusionEngine(self.config)
        self.predictor = predictor or HybridPredictor(self.config)
        self.explainer = explainer or Explainer()
        self.reporter = reporter or MetricsReporter(self.config.metrics_seed)

    async def _checkpoint(self, cancel_token: Optional[CancellationToken]) -> None:
        """Yield to the event loop and honour cancellation between stages"""
        await asyncio.sleep(0)
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

    async def run(self, source: DatasetSource, fusion_type,
                  cancel_token: Optional[CancellationToken] = None) -> PipelineResult:
        """
        Process one dataset with the given fusion strategy

        Args:
            source: Path, bytes or file-like object holding UTF-8 JSON
            fusion_type: "Early", "Late", "Attention" or a FusionStrategy
            cancel_token: Optional token checked between stages

        Returns:
            PipelineResult: Either an error message or the full result
        """
        start_time = time.perf_counter()
        try:
            strategy = FusionStrategy.parse(fusion_type)
            ensure_initialized()
            logging.info(f"Starting dataset processing with {strategy.value} fusion strategy...")

            try:
                content = await asyncio.to_thread(read_source, source)
            except (OSError, TypeError) as e:
                logging.error(f"Failed to read dataset: {e}")
                return PipelineResult.failure(MSG_READ_ERROR)

            result = await self._process(content, strategy, cancel_token)
            logging.info(f"Processing finished in {time.perf_counter() - start_time:.2f}s")
            return result

        except PipelineError as e:
            logging.error(f"Pipeline stopped: {type(e).__name__}: {e}")
            return PipelineResult.failure(e.user_message)
        except Exception as e:
            logging.exception(f"Error processing dataset: {e}")
            return PipelineResult.failure(ProcessingError.user_message)

    async def _process(self, content: bytes, strategy: FusionStrategy,
                       cancel_token: Optional[CancellationToken]) -> PipelineResult:
        raw = parse_dataset(content)
        del content

        logging.info("Validating dataset...")
        report = self.validator.validate(raw)
        if report.warnings:
            logging.info(f"Validation passed with {len(report.warnings)} warning(s)")
        await self._checkpoint(cancel_token)

        logging.info("Preprocessing data...")
        preprocessed = self.preprocessor.preprocess(raw)
        del raw
        await self._checkpoint(cancel_token)

        logging.info("Extracting features...")
        features = extract_feature_set(preprocessed, self.extractors)
        modalities = preprocessed.modalities
        del preprocessed
        await self._checkpoint(cancel_token)

        fused = self.fusion_engine.fuse(strategy, features.eeg_wide, features.eeg_narrow, features.audio)
        await self._checkpoint(cancel_token)

        prediction = self.predictor.predict(fused)
        await self._checkpoint(cancel_token)

        explanation = self.explainer.explain(prediction, modalities)
        model_performance = self.reporter.report()

        logging.info(f"Prediction: {prediction.label} (p={prediction.probability:.2f}, "
                     f"confidence={prediction.confidence:.2f}), fused {fused.rows}x{fused.width}")
        return PipelineResult.success(prediction, explanation, features, fused, model_performance)


async def process_dataset(source: DatasetSource, fusion_type,
                          config: Optional[PipelineConfig] = None,
                          cancel_token: Optional[CancellationToken] = None) -> PipelineResult:
    """
    Process a dataset with a default pipeline

    Never raises for bad input or stage failures; the outcome is carried in
    the returned PipelineResult.
    """
    try:
        pipeline = DatasetPipeline(config)
    except Exception as e:
        logging.error(f"Failed to build pipeline: {e}")
        return PipelineResult.failure(ProcessingError.user_message)
    return await pipeline.run(source, fusion_type, cancel_token)
