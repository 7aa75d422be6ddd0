import logging
from concurrent.futures import Executor
from typing import Optional

from lpr.core.cancellable_task import CancellableTask, CompletionCallback
from lpr.domain.Interfaces.text_normalizer import ITextNormalizer
from lpr.domain.Models.frame import Frame
from lpr.domain.Models.rect import Rect
from lpr.domain.Models.stage_outcome import StageOutcome
from lpr.domain.Services.candidate_selector import CandidateSelector
from lpr.domain.Services.text_candidate_extractor import TextCandidateExtractor

logger = logging.getLogger(__name__)


class RecognizeTextTask(CancellableTask):
    """
    Etapa de reconocimiento: extracción multi-pasada -> corrección -> selección.

    Las pasadas corren en un único worker dedicado (`executor`, un solo hilo)
    para no tener varias variantes de la imagen en memoria a la vez.
    Sin executor, el trabajo corre en el hilo que llama a start().
    """

    def __init__(
        self,
        frame: Frame,
        region: Rect,
        extractor: TextCandidateExtractor,
        corrector: ITextNormalizer,
        selector: CandidateSelector,
        executor: Optional[Executor] = None,
        completion: Optional[CompletionCallback] = None,
    ):
        super().__init__(name="recognize", completion=completion)
        self.frame = frame
        self.region = region
        self.extractor = extractor
        self.corrector = corrector
        self.selector = selector
        self.executor = executor

    @property
    def recognized_text(self) -> Optional[str]:
        outcome = self.outcome
        return outcome.value if outcome is not None and outcome.ok else None

    def main(self) -> None:
        if self.executor is None:
            self._recognize()
        else:
            self.executor.submit(self._recognize)

    def _recognize(self) -> None:
        try:
            candidates = self.extractor.extract(self.frame.data, self.region, should_cancel=lambda: self.is_cancelled)
            if self.is_cancelled:
                self.finish(self.empty_outcome())
                return

            corrected = [self.corrector.normalize(c.raw_string) for c in candidates]
            plate = self.selector.select(corrected, full_frame=self.region.is_full_frame)
        except Exception as e:
            logger.exception("[recognize] Error reconociendo texto")
            self.finish(StageOutcome.failure(e))
            return

        logger.debug(f"[recognize] candidatos={len(candidates)} placa={plate}")
        self.finish(StageOutcome.success(plate) if plate else StageOutcome.empty())
