"""
Literal text of the printed Philippine Dental Association chart.

Pure data: labels, consent paragraphs and the canonical keys each printed item
reads.  Wording matches the paper form, typos included.
"""
from __future__ import annotations

from typing import NamedTuple

ASSOCIATION_NAME = "PHILIPPINE DENTAL ASSOCIATION"
FORM_TITLE = "DENTAL CHART"


class ConsentSection(NamedTuple):
    title: str
    text: str
    initial_key: str


class CheckItem(NamedTuple):
    label: str
    key: str


CONSENT_SECTIONS: tuple[ConsentSection, ...] = (
    ConsentSection(
        "TREATMENT TO BE DONE:",
        "I understand and consent to have any treatment done by the dentist. After the procedure, the risks & "
        "benefits & cost have been fully explained. These treatments include, but are not limited to x-rays, "
        "cleanings/periodontal therapy, fillings, crowns, bridges & root canal therapy, local anesthetics & "
        "surgical cases.",
        "treatmentInitial",
    ),
    ConsentSection(
        "DRUGS & MEDICATIONS:",
        "I understand that antibiotics, analgesics & other medications can cause allergic reactions like redness "
        "& swelling of tissues, pain, itching, vomiting, and/or anaphylactic shock.",
        "drugsInitial",
    ),
    ConsentSection(
        "CHANGES IN TREATMENT PLAN:",
        "I understand that during treatment it may be necessary to change/add procedures because of conditions "
        "found while working on the teeth that was not discovered during examination. For example, root canal "
        "therapy may be needed following routine restorative procedures. I give my permission to the dentist to "
        "make any/all changes and additions as necessary. It is my responsibility to pay all the extra costs "
        "related to the procedures performed.",
        "planChangesInitial",
    ),
    ConsentSection(
        "RADIOGRAPH:",
        "I understand that an x-ray shot or a radiograph maybe necessary as part of diagnostic aid to come up "
        "with tentative diagnosis of my Dental problem and to support judgement, but this is not a perfect "
        "instrument, & that by its use, the Dentist cannot accurately predict future events, are subject to "
        "unpredictable complications that later, on may lead to sudden change of treatment plan and subject to "
        "new charges.",
        "radiographInitial",
    ),
    ConsentSection(
        "REMOVAL OF TEETH:",
        "I understand that alternatives to tooth removal (root canal therapy, crowns & periodontal surgery, "
        "etc.) & I completely understand that retaining the teeth by any dental specialty, always removes all "
        "the infections, if present, & it may be necessary to have further treatment. I understand the risk "
        "involved in having teeth removed, such as pain, swelling, spread of infection, dry socket, loss of "
        "feeling in my teeth, lips, tongue & surrounding tissue (paresthesia) that can last for an indefinite "
        "period of time. I understand that I may need further treatment under a specialist if complications "
        "arise during or following treatment.",
        "removalInitial",
    ),
    ConsentSection(
        "CROWNS (CAPS) & BRIDGES:",
        "Preparing a tooth may irritate the nerve tissue in the center of the tooth, leaving the tooth extra "
        "sensitive to heat, cold & pressure. This sensitivity usually subsides, but where it does not, root "
        "canal therapy or tooth extraction may be necessary. It may not be possible to match the color of "
        "natural teeth exactly with artificial teeth. I further understand that I may be wearing temporary "
        "crowns, which may come off easily & that I must be careful to ensure that they are kept on. If they "
        "come off before my next visit or if the tooth structure comes off cement, it is my responsibility to "
        "see the dentist immediately for permanent cementation within 20 days from tooth preparation, as "
        "excessive days delay may allow for tooth movement, which may necessitate a remake of the crown, bridge "
        "or cap. I understand that at times of permanent cementation, if there is need to modify the "
        "shape/fit/size/color of my new crown, bridges or cap (including shape, fit, size, & color) will be "
        "before permanent cementation.",
        "crownsInitial",
    ),
    ConsentSection(
        "ENDODONTICS (ROOT CANAL):",
        "I understand there is no guarantee that a root canal treatment will save a tooth & that complications "
        "can occur from the treatment itself, that occasionally metal instruments and/or files are used in "
        "their manufacture, and that it may be necessary to have the tooth extracted if complications arise. I "
        "also understand that endodontic files & drills are very fragile instruments & stresses vented in their "
        "manufacture & calcifications present in teeth can cause them to break apart in the procedure, I am "
        "responsible for any additional cost for treatment performed by the endodontist. I understand that a "
        "tooth may require removal in spite of all efforts to save it.",
        "rootCanalInitial",
    ),
    ConsentSection(
        "PERIODONTAL DISEASE:",
        "I understand that periodontal disease is a serious condition causing gum & bone inflammation &/or loss "
        "& that can lead eventually to the loss of my teeth. I understand that various treatment plans to "
        "correct the condition depending upon each individual situation or without replacement. I understand "
        "that undertaking any dental procedures may have necessary adverse effects on my pre-existing "
        "periodontal conditions.",
        "periodontalInitial",
    ),
    ConsentSection(
        "FILLINGS:",
        "I understand that care must be exercised in chewing on fillings, especially during the first 24 hours "
        "to avoid breakage. I understand that a more extensive restoration than originally planned may "
        "sometimes be required due to additional unseen decay. I acknowledge that the newly placed filling or "
        "crown, sensitivity is a common, but usually temporary, after-effect of a newly placed filling. I "
        "further understand that filling a tooth may irritate the nerve tissue creating sensitivity or "
        "requiring further treatment, including root canal treatment or tooth extraction.",
        "fillingsInitial",
    ),
    ConsentSection(
        "DENTURES:",
        "I understand that wearing of dentures can be difficult. Sore spots, altered speech & difficulty in "
        "eating are common problems. Immediate dentures (placement of denture immediately after extractions) "
        "may be painful. Immediate dentures may require considerable adjusting & several relines. A permanent "
        "reline will be needed later, when the tissue is completely healed. This is an additional charge. If a "
        "remake is required due to my delay of more than 30 days, there will be additional charges. A "
        "permanent reline will be needed later, which is not covered in the initial cost of dentures or "
        "surgical extractions if alterations are requested or any time that has not been specified or "
        "alterations are requested at any time.",
        "denturesInitial",
    ),
)

FINAL_CONSENT_PARAGRAPHS: tuple[str, ...] = (
    "I understand that dentistry is not an exact science and that no dentist can properly guarantee accurate "
    "results all the time.",
    "",
    "I hereby authorize any of the doctors/dental auxiliaries to proceed with & perform the dental restorations "
    "& treatments as explained to me. I understand that these are subject to modification depending on "
    "undiagnosable circumstances that may arise during the course of treatment. I understand that regardless "
    "of my dental insurance coverage I may have, I am responsible for payment of dental fees. I agree to pay "
    "any attorney's fees, collection fee, or court costs that may be incurred to satisfy any obligation to "
    "this office. All treatment were properly explained to me & any untoward circumstances that may arise "
    "during the procedure, the attending dentist will not be held liable since it is my free will, with full "
    "trust & confidence in him/her, to undergo Dental Treatment under his/her care.",
)

# ── Medical history questions ────────────────────────────────────────────

# (question, key, follow-up prompt, rule offset from the margin, detail key)
PAGE1_QUESTIONS: tuple[tuple[str, str, str | None, float | None, str | None], ...] = (
    ("1. Are you in good health?", "goodHealth", None, None, None),
    ("2. Are you under medical treatment now?", "underTreatment",
     "   If so, what is the condition being treated?", 65.0, "treatmentCondition"),
    ("3. Have you ever been hospitalized or had serious illness or surgical operation?", "seriousIllness",
     "   If so, what illness or operation?", 55.0, "illnessDetails"),
    ("4. Have you been hospitalized?", "hospitalized",
     "   If so, when and why?", 40.0, "hospitalizationDetails"),
    ("5. Are you taking any prescription/non-prescription medication?", "takingMedication",
     "   If so, please specify", 40.0, "medicationsList"),
)

ALLERGY_ROWS: tuple[tuple[tuple[int, CheckItem], ...], ...] = (
    ((0, CheckItem("Local Anesthetic (ex. Lidocaine)", "allergy_localAnesthetic")),
     (1, CheckItem("Penicillin, Antibiotics", "allergy_penicillin"))),
    ((0, CheckItem("Aspirin", "allergy_aspirin")),
     (1, CheckItem("Latex", "allergy_latex"))),
    ((2, CheckItem("Sulfa drugs", "allergy_sulfaDrugs")),),
    ((2, CheckItem("Others", "allergy_others")),),
)
# "Penicillin, Antibiotics" is one printed box fed by either allergy key.
ALLERGY_EXTRA_KEYS = {"allergy_penicillin": ("allergy_antibiotics",)}

WOMEN_QUESTIONS: tuple[CheckItem, ...] = (
    CheckItem("    Are you pregnant?", "women_pregnant"),
    CheckItem("    Are you nursing?", "women_nursing"),
    CheckItem("    Are you taking birth control pills?", "women_birthControl"),
)

# Three printed columns, read row by row.
MEDICAL_CONDITION_ROWS: tuple[tuple[CheckItem | None, ...], ...] = (
    (CheckItem("High Blood Pressure", "highBloodPressure"), CheckItem("Heart Disease", "heartDisease"),
     CheckItem("Cancer/Tumors", "cancerTumors")),
    (CheckItem("Low Blood Pressure", "lowBloodPressure"), CheckItem("Heart Murmur", "heartMurmur"),
     CheckItem("Anemia", "anemia")),
    (CheckItem("Epilepsy/Convulsions", "epilepsyConvulsions"),
     CheckItem("Hepatitis/Liver Disease", "hepatitisLiverDisease"), CheckItem("Angina", "angina")),
    (CheckItem("AIDS or HIV Infection", "aidsHivInfection"), CheckItem("Rheumatic Fever", "rheumaticFever"),
     CheckItem("Asthma", "asthma")),
    (CheckItem("Sexually Transmitted Disease", "sexuallyTransmittedDisease"),
     CheckItem("Hay Fever/Allergies", "hayFeverAllergies"), CheckItem("Emphysema", "emphysema")),
    (CheckItem("Stomach Troubles/Ulcers", "stomachTroublesUlcers"),
     CheckItem("Respiratory Problems", "respiratoryProblems"), CheckItem("Bleeding Problems", "bleedingProblems")),
    (CheckItem("Fainting Seizure", "faintingSeizure"), CheckItem("Hepatitis/Jaundice", "hepatitisJaundice"),
     CheckItem("Blood Diseases", "bloodDiseases")),
    (CheckItem("Rapid Weight Loss", "rapidWeightLoss"), CheckItem("Tuberculosis", "tuberculosis"),
     CheckItem("Head Injuries", "headInjuries")),
    (CheckItem("Radiation Therapy", "radiationTherapy"), CheckItem("Swollen Ankles", "swollenAnkles"),
     CheckItem("Arthritis/Rheumatism", "arthritisRheumatism")),
    (CheckItem("Joint Replacement", "jointReplacementImplant"), CheckItem("Kidney Disease", "kidneyDisease"),
     CheckItem("Other", "other")),
    (CheckItem("Heart Surgery", "heartSurgery"), CheckItem("Diabetes", "diabetes"), None),
    (CheckItem("Heart Attack", "heartAttack"), CheckItem("Chest Pain", "chestPain"), None),
    (CheckItem("Thyroid Problem", "thyroidProblem"), CheckItem("Stroke", "stroke"), None),
)

# ── Dental chart page ────────────────────────────────────────────────────

LEGEND_COLUMNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Condition", (
        "P - Present Teeth",
        "D - Decayed (Caries indicated for Filling)",
        "M - Missing due to Caries",
        "MO - Missing due to Other Causes",
        "Im - Impacted Tooth",
        "Sp - Supernumerary Tooth",
        "Rf - Root Fragment",
        "Un - Unerupted",
    )),
    ("Restorations & Prosthetics", (
        "Am - Amalgam Filling",
        "Co - Composite Filling",
        "JC - Jacket Crown",
        "Ab - Abutment",
        "Att - Attachment",
        "P - Pontic",
        "In - Inlay",
        "Imp - Implant",
        "S - Sealants",
        "Rm - Removable Denture",
    )),
    ("Surgery", (
        "X - Extraction due to Caries",
        "XO - Extraction due to Other Causes",
        "",
        "X-ray Taken:",
        "  Periapical (Th No.: ___)",
        "  Panoramic",
        "  Cephalometric",
        "  Occlusal (Upper/Lower)",
        "  Others:",
    )),
)

CLINICAL_FINDING_COLUMNS: tuple[tuple[str, tuple[CheckItem, ...]], ...] = (
    ("Periodontal Screening:", (
        CheckItem("Gingivitis", "gingivitis"),
        CheckItem("Early Periodontitis", "earlyPeriodontitis"),
        CheckItem("Moderate Periodontitis", "moderatePeriodontitis"),
        CheckItem("Advanced Periodontitis", "advancedPeriodontitis"),
    )),
    ("Occlusion:", (
        CheckItem("Class (Molar)", "occlusionClass"),
        CheckItem("Overjet", "overjet"),
        CheckItem("Overbite", "overbite"),
        CheckItem("Midline Deviation", "midlineDeviation"),
        CheckItem("Crossbite", "crossbite"),
    )),
    ("Appliances:", (
        CheckItem("Orthodontic", "orthodontic"),
        CheckItem("Stayplate", "stayplate"),
        CheckItem("Others", "otherAppliances"),
    )),
    ("TMD:", (
        CheckItem("Clenching", "clenching"),
        CheckItem("Clicking", "clicking"),
        CheckItem("Trismus", "trismus"),
        CheckItem("Muscle Spasm", "muscleSpasm"),
    )),
)

# Printed under the odontogram, in this order.
TOOTH_SUMMARY_ITEMS: tuple[CheckItem, ...] = (
    CheckItem("Present", "presentTeeth"),
    CheckItem("Decayed", "decayedTeeth"),
    CheckItem("Missing", "missingTeeth"),
    CheckItem("Impacted", "impactedTeeth"),
    CheckItem("Root Fragment", "rootFragments"),
    CheckItem("Supernumerary", "supernumeraryTeeth"),
    CheckItem("Unerupted", "uneruptedTeeth"),
    CheckItem("Extraction (Caries)", "extractionCaries"),
    CheckItem("Extraction (Other)", "extractionOther"),
    CheckItem("Amalgam", "amalgamFilling"),
    CheckItem("Composite", "compositeFilling"),
    CheckItem("Jacket Crown", "jacketCrown"),
    CheckItem("Inlay/Implant", "inlayImplant"),
    CheckItem("Sealants", "sealants"),
)
